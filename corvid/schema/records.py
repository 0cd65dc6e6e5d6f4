# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Record types for quantum catches, colour spaces and colour distances.

Design principles:
- Immutable: All records are frozen dataclasses with read-only arrays
- Derived: Every transform returns a new record, inputs are never touched
- Self-describing: Visual-system metadata travels with the data
- Serializable: JSON-ready via to_dict() / to_json()

Three record kinds flow through Corvid:

    QuantumCatchRecord  -- photoreceptor responses, one row per sample
            |
            v
    ColourSpaceRecord   -- coordinates in a geometric colour space
            |
            v
    DistanceRecord      -- pairwise chromatic / achromatic contrasts
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0"

# Rows whose sums stay within this distance of 1 count as relative.
RELATIVE_TOLERANCE = 1e-3


# =============================================================================
# Enumerations
# =============================================================================


class CatchScale(Enum):
    """Scale of the quantum catches in a record."""
    QI = "Qi"  # raw quantum catch
    FI = "fi"  # log-transformed (Fechner) quantum catch
    EI = "Ei"  # hyperbolically transformed quantum catch


class ModelId(Enum):
    """Geometric colour-space models."""
    DISPACE = "dispace"
    TRISPACE = "trispace"
    TCS = "tcs"
    CATEGORICAL = "categorical"
    HEXAGON = "hexagon"
    COC = "coc"
    CIEXYZ = "CIEXYZ"
    CIELAB = "CIELAB"
    CIELCH = "CIELCh"


class NoiseMode(Enum):
    """How receptor noise is estimated in the receptor-noise model."""
    NEURAL = "neural"    # proportional to the Weber fraction only
    QUANTUM = "quantum"  # neural noise plus photon shot noise


class LumContrast(Enum):
    """Luminance contrast formulas."""
    SIMPLE = "simple"
    WEBER = "weber"
    MICHELSON = "michelson"


# =============================================================================
# Array Helpers
# =============================================================================


def _frozen_array(values: Any, dtype: Any = np.float64) -> NDArray:
    """Copy values into a read-only array."""
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


def _jsonable(values: NDArray) -> list:
    """Array to list with NaN encoded as None."""
    out = []
    for v in np.asarray(values).tolist():
        if isinstance(v, float) and math.isnan(v):
            out.append(None)
        else:
            out.append(v)
    return out


def _from_jsonable(values: Sequence) -> NDArray[np.float64]:
    """Inverse of _jsonable for float columns."""
    return np.array(
        [np.nan if v is None else v for v in values], dtype=np.float64
    )


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Accept an enum member or its value."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise ContractError(
            f"Unknown {enum_cls.__name__} {value!r}; expected one of {allowed}"
        ) from None


def _default_labels(n: int) -> tuple[str, ...]:
    """Row labels "1".."n" for tables without names."""
    return tuple(str(i + 1) for i in range(n))


# =============================================================================
# Quantum-Catch Record
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class QuantumCatchRecord:
    """
    Photoreceptor quantum catches, one row per sample.

    Produced by a visual-model stage outside Corvid. Columns hold the
    chromatic channels first and, when the visual system has one, the
    achromatic channel last.

    Attributes:
        labels: Sample names, one per row
        channels: Column names (chromatic channels, then achromatic)
        data: Array of shape (n, cone_count [+ 1])
        cone_count: Number of chromatic channels
        catch_scale: Qi (raw), fi (log) or Ei (hyperbolic); None when unknown
        relative: True iff each row of chromatic catches sums to 1
        visual_system: Chromatic visual-system tag
        achromatic: Achromatic receptor tag, "none" when absent
        background, illuminant, von_kries: Descriptive tags, carried unchanged
        max_catches: Optional maximum catches defining the gamut boundary
        inferred: True when metadata was guessed from a bare table
    """
    labels: tuple[str, ...]
    channels: tuple[str, ...]
    data: NDArray[np.float64]
    cone_count: int
    catch_scale: Optional[CatchScale] = CatchScale.QI
    relative: bool = False
    visual_system: str = "user-defined"
    achromatic: str = "none"
    background: Optional[str] = None
    illuminant: Optional[str] = None
    von_kries: bool = False
    max_catches: Optional[NDArray[np.float64]] = None
    inferred: bool = False

    def __post_init__(self) -> None:
        """Validate record shape against its declared metadata."""
        data = _frozen_array(self.data)
        if data.ndim != 2:
            raise ContractError(
                f"Quantum catches must be a 2-D table, got {data.ndim} dimension(s)"
            )
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "labels", tuple(str(lab) for lab in self.labels))
        object.__setattr__(self, "channels", tuple(str(ch) for ch in self.channels))
        object.__setattr__(
            self, "catch_scale", _coerce_enum(CatchScale, self.catch_scale)
        )
        if self.max_catches is not None:
            object.__setattr__(
                self, "max_catches", _frozen_array(np.atleast_2d(self.max_catches))
            )

        n_rows, n_cols = data.shape
        if len(self.labels) != n_rows:
            raise ContractError(
                f"{len(self.labels)} labels given for {n_rows} rows"
            )
        if len(self.channels) != n_cols:
            raise ContractError(
                f"{len(self.channels)} channel names given for {n_cols} columns"
            )
        if self.cone_count < 1:
            raise ContractError(f"cone_count must be >= 1, got {self.cone_count}")
        expected = self.cone_count + (1 if self.has_achromatic else 0)
        if n_cols != expected:
            raise ContractError(
                f"Record declares {self.cone_count} cone(s) and achromatic "
                f"channel {self.achromatic!r}, so rows need {expected} values; "
                f"got {n_cols}"
            )

    @property
    def has_achromatic(self) -> bool:
        """True if the visual system declares an achromatic channel."""
        return self.achromatic != "none"

    @property
    def catches(self) -> NDArray[np.float64]:
        """Chromatic catches, shape (n, cone_count)."""
        return self.data[:, : self.cone_count]

    @property
    def cone_channels(self) -> tuple[str, ...]:
        """Names of the chromatic channels."""
        return self.channels[: self.cone_count]

    @property
    def lum(self) -> Optional[NDArray[np.float64]]:
        """Achromatic channel values, or None."""
        if not self.has_achromatic:
            return None
        return self.data[:, self.cone_count]

    @property
    def n_samples(self) -> int:
        """Number of rows."""
        return len(self.labels)

    def __len__(self) -> int:
        return self.n_samples

    @classmethod
    def from_table(
        cls,
        table: Any,
        *,
        qcatch: Optional[CatchScale | str] = None,
        labels: Optional[Sequence[str]] = None,
        achromatic: bool = False,
        visual_system: str = "user-defined",
    ) -> QuantumCatchRecord:
        """
        Build a record from a bare numeric table.

        Args:
            table: One of:
                - 2-D array-like (columns taken positionally)
                - Mapping of column name -> values
                - Data-frame-like object exposing ``columns``, ``index``
                  and ``to_numpy()``
            qcatch: Scale of the catches (required for distances)
            labels: Row labels (defaults to the frame index, or "1".."n")
            achromatic: If True, the last column is the achromatic channel
            visual_system: Tag stored on the record

        Returns:
            QuantumCatchRecord with ``inferred=True``. Columns that are
            entirely NaN are dropped; ``relative`` is set from the row sums.
        """
        names, row_labels, values = _split_table(table)
        if labels is not None:
            row_labels = tuple(labels)
        if row_labels is None:
            row_labels = _default_labels(values.shape[0])

        keep = ~np.all(np.isnan(values), axis=0) if values.size else np.ones(
            values.shape[1], dtype=bool
        )
        values = values[:, keep]
        names = tuple(n for n, k in zip(names, keep) if k)

        cone_count = values.shape[1] - (1 if achromatic else 0)
        chromatic = values[:, :cone_count]
        relative = bool(
            chromatic.size
            and np.all(np.abs(chromatic.sum(axis=1) - 1.0) <= RELATIVE_TOLERANCE)
        )

        return cls(
            labels=row_labels,
            channels=names,
            data=values,
            cone_count=cone_count,
            catch_scale=qcatch,
            relative=relative,
            visual_system=visual_system,
            achromatic="user-defined" if achromatic else "none",
            inferred=True,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        result = {
            "version": SCHEMA_VERSION,
            "labels": list(self.labels),
            "channels": list(self.channels),
            "data": [_jsonable(row) for row in self.data],
            "cone_count": self.cone_count,
            "catch_scale": self.catch_scale.value if self.catch_scale else None,
            "relative": self.relative,
            "visual_system": self.visual_system,
            "achromatic": self.achromatic,
            "background": self.background,
            "illuminant": self.illuminant,
            "von_kries": self.von_kries,
        }
        if self.max_catches is not None:
            result["max_catches"] = [_jsonable(row) for row in self.max_catches]
        if self.inferred:
            result["inferred"] = True
        return result

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> QuantumCatchRecord:
        """Deserialize from dictionary."""
        max_catches = data.get("max_catches")
        return cls(
            labels=tuple(data["labels"]),
            channels=tuple(data["channels"]),
            data=np.array([_from_jsonable(row) for row in data["data"]]).reshape(
                len(data["labels"]), len(data["channels"])
            ),
            cone_count=data["cone_count"],
            catch_scale=data.get("catch_scale"),
            relative=data.get("relative", False),
            visual_system=data.get("visual_system", "user-defined"),
            achromatic=data.get("achromatic", "none"),
            background=data.get("background"),
            illuminant=data.get("illuminant"),
            von_kries=data.get("von_kries", False),
            max_catches=(
                np.array([_from_jsonable(row) for row in max_catches])
                if max_catches is not None else None
            ),
            inferred=data.get("inferred", False),
        )

    @classmethod
    def from_json(cls, json_str: str) -> QuantumCatchRecord:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


def _split_table(
    table: Any,
) -> tuple[tuple[str, ...], Optional[tuple[str, ...]], NDArray[np.float64]]:
    """Return (column names, row labels or None, values) for a bare table."""
    if hasattr(table, "columns") and hasattr(table, "to_numpy"):
        names = tuple(str(c) for c in table.columns)
        index = getattr(table, "index", None)
        labels = tuple(str(i) for i in index) if index is not None else None
        values = np.asarray(table.to_numpy(), dtype=np.float64)
    elif isinstance(table, Mapping):
        names = tuple(str(k) for k in table.keys())
        columns = [np.asarray(v, dtype=np.float64) for v in table.values()]
        if len({len(c) for c in columns}) > 1:
            raise ContractError("Table columns have different lengths")
        values = (
            np.column_stack(columns) if columns else np.empty((0, 0))
        )
        labels = None
    else:
        values = np.asarray(table, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(1, -1)
        if values.ndim != 2:
            raise ContractError(
                f"Quantum catches must be a 2-D table, got {values.ndim} dimension(s)"
            )
        names = tuple(f"V{i + 1}" for i in range(values.shape[1]))
        labels = None
    return names, labels, values


# =============================================================================
# Colour-Space Record
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class ColourSpaceRecord:
    """
    Samples projected into a geometric colour space.

    Columns depend on the model but always include ``r_vec``, a
    saturation-like distance from the achromatic centre. Label columns
    (e.g. ``category``) are object arrays holding str or None.

    Attributes:
        labels: Sample names, one per row
        model: Colour-space model that produced the coordinates
        columns: Ordered mapping of column name -> per-sample values
        cone_count: Number of chromatic channels used by the model
        lum: Achromatic channel values carried from the input, or None
        max_gamut: Gamut boundary in model coordinates, or None
        (remaining fields are inherited from the QuantumCatchRecord)
    """
    labels: tuple[str, ...]
    model: ModelId
    columns: Mapping[str, NDArray]
    cone_count: int
    catch_scale: Optional[CatchScale] = None
    relative: bool = False
    visual_system: str = "user-defined"
    achromatic: str = "none"
    background: Optional[str] = None
    illuminant: Optional[str] = None
    von_kries: bool = False
    lum: Optional[NDArray[np.float64]] = None
    max_gamut: Optional[NDArray[np.float64]] = None

    def __post_init__(self) -> None:
        """Freeze columns and validate their lengths."""
        object.__setattr__(self, "labels", tuple(str(lab) for lab in self.labels))
        object.__setattr__(self, "model", _coerce_enum(ModelId, self.model))
        object.__setattr__(
            self, "catch_scale", _coerce_enum(CatchScale, self.catch_scale)
        )
        n = len(self.labels)
        frozen: dict[str, NDArray] = {}
        for name, values in self.columns.items():
            values = np.asarray(values)
            dtype = object if values.dtype.kind in "OUS" else np.float64
            arr = _frozen_array(values, dtype=dtype)
            if arr.shape != (n,):
                raise ContractError(
                    f"Column {name!r} has shape {arr.shape}, expected ({n},)"
                )
            frozen[name] = arr
        object.__setattr__(self, "columns", MappingProxyType(frozen))
        if self.lum is not None:
            lum = _frozen_array(self.lum)
            if lum.shape != (n,):
                raise ContractError(
                    f"Achromatic values have shape {lum.shape}, expected ({n},)"
                )
            object.__setattr__(self, "lum", lum)
        if self.max_gamut is not None:
            object.__setattr__(self, "max_gamut", _frozen_array(self.max_gamut))

    def __getitem__(self, name: str) -> NDArray:
        return self.columns[name]

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def n_samples(self) -> int:
        """Number of rows."""
        return len(self.labels)

    @property
    def has_achromatic(self) -> bool:
        """True if the visual system declares an achromatic channel."""
        return self.achromatic != "none"

    def coordinates(self, names: Sequence[str]) -> NDArray[np.float64]:
        """Stack the named columns into an (n, len(names)) float array."""
        return np.column_stack(
            [np.asarray(self.columns[name], dtype=np.float64) for name in names]
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        result = {
            "version": SCHEMA_VERSION,
            "model": self.model.value,
            "labels": list(self.labels),
            "columns": {name: _jsonable(v) for name, v in self.columns.items()},
            "label_columns": [
                name for name, v in self.columns.items() if v.dtype == object
            ],
            "cone_count": self.cone_count,
            "catch_scale": self.catch_scale.value if self.catch_scale else None,
            "relative": self.relative,
            "visual_system": self.visual_system,
            "achromatic": self.achromatic,
            "background": self.background,
            "illuminant": self.illuminant,
            "von_kries": self.von_kries,
        }
        if self.lum is not None:
            result["lum"] = _jsonable(self.lum)
        if self.max_gamut is not None:
            result["max_gamut"] = [_jsonable(row) for row in self.max_gamut]
        return result

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> ColourSpaceRecord:
        """Deserialize from dictionary."""
        label_columns = set(data.get("label_columns", ()))
        columns = {}
        for name, values in data["columns"].items():
            if name in label_columns or any(isinstance(v, str) for v in values):
                columns[name] = np.array(values, dtype=object)
            else:
                columns[name] = _from_jsonable(values)
        return cls(
            labels=tuple(data["labels"]),
            model=data["model"],
            columns=columns,
            cone_count=data["cone_count"],
            catch_scale=data.get("catch_scale"),
            relative=data.get("relative", False),
            visual_system=data.get("visual_system", "user-defined"),
            achromatic=data.get("achromatic", "none"),
            background=data.get("background"),
            illuminant=data.get("illuminant"),
            von_kries=data.get("von_kries", False),
            lum=_from_jsonable(data["lum"]) if "lum" in data else None,
            max_gamut=(
                np.array([_from_jsonable(row) for row in data["max_gamut"]])
                if "max_gamut" in data else None
            ),
        )

    @classmethod
    def from_json(cls, json_str: str) -> ColourSpaceRecord:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Distance Record
# =============================================================================


@dataclass(frozen=True, slots=True, eq=False)
class DistanceRecord:
    """
    Pairwise colour distances.

    Pairs are unordered and listed in index-ascending order of the input
    rows, each pair exactly once. ``dL`` is always present; pairs without
    an achromatic contrast hold NaN.

    Attributes:
        patch1, patch2: Labels of the two samples in each pair
        dS: Chromatic contrast per pair
        dL: Achromatic contrast per pair (NaN when not computed)
        noise_weighted: True for receptor-noise-limited distances
        cone_count: Number of chromatic channels the distances used
        method: Description of the dS / dL formulas
        reference: Distances between synthetic reference stimuli, computed
            alongside receptor-noise distances to calibrate dS magnitudes
    """
    patch1: tuple[str, ...]
    patch2: tuple[str, ...]
    dS: NDArray[np.float64]
    dL: NDArray[np.float64]
    noise_weighted: bool
    cone_count: int
    method: str = ""
    reference: Optional[DistanceRecord] = None

    def __post_init__(self) -> None:
        """Validate pair columns line up."""
        object.__setattr__(self, "patch1", tuple(str(p) for p in self.patch1))
        object.__setattr__(self, "patch2", tuple(str(p) for p in self.patch2))
        object.__setattr__(self, "dS", _frozen_array(self.dS))
        object.__setattr__(self, "dL", _frozen_array(self.dL))
        n = len(self.patch1)
        if len(self.patch2) != n or self.dS.shape != (n,) or self.dL.shape != (n,):
            raise ContractError(
                "patch1, patch2, dS and dL must all have one entry per pair"
            )

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """(patch1, patch2) label pairs."""
        return tuple(zip(self.patch1, self.patch2))

    @property
    def has_achromatic(self) -> bool:
        """True if any achromatic contrast was computed."""
        return bool(np.any(~np.isnan(self.dL)))

    def __len__(self) -> int:
        return len(self.patch1)

    def get(self, label1: str, label2: str) -> tuple[float, float]:
        """(dS, dL) for a pair, in either order."""
        for i, (a, b) in enumerate(self.pairs):
            if (a, b) == (label1, label2) or (a, b) == (label2, label1):
                return float(self.dS[i]), float(self.dL[i])
        raise KeyError(f"No pair ({label1!r}, {label2!r})")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        result = {
            "version": SCHEMA_VERSION,
            "patch1": list(self.patch1),
            "patch2": list(self.patch2),
            "dS": _jsonable(self.dS),
            "dL": _jsonable(self.dL),
            "noise_weighted": self.noise_weighted,
            "cone_count": self.cone_count,
            "method": self.method,
        }
        if self.reference is not None:
            result["reference"] = self.reference.to_dict()
        return result

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> DistanceRecord:
        """Deserialize from dictionary."""
        return cls(
            patch1=tuple(data["patch1"]),
            patch2=tuple(data["patch2"]),
            dS=_from_jsonable(data["dS"]),
            dL=_from_jsonable(data["dL"]),
            noise_weighted=data["noise_weighted"],
            cone_count=data["cone_count"],
            method=data.get("method", ""),
            reference=(
                DistanceRecord.from_dict(data["reference"])
                if data.get("reference") else None
            ),
        )

    @classmethod
    def from_json(cls, json_str: str) -> DistanceRecord:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


__all__ = [
    "SCHEMA_VERSION",
    "RELATIVE_TOLERANCE",
    "CatchScale",
    "ModelId",
    "NoiseMode",
    "LumContrast",
    "QuantumCatchRecord",
    "ColourSpaceRecord",
    "DistanceRecord",
]
