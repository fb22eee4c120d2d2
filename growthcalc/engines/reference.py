"""
Reference table store.

LMS reference tables are shipped as YAML assets under knowledge/growth and
loaded once per process. Every structural check happens here, at load
time, so the interpolation hot path never re-validates. Loaded tables are
frozen and shared read-only by all callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from growthcalc.config import OTHER_SEX_POLICIES
from growthcalc.engines.lms import LMS, interpolate_lms
from growthcalc.errors import InvalidMeasurement, ReferenceDataCorrupt
from growthcalc.log import get_logger
from growthcalc.models import Measure, Sex
from knowledge.growth import GROWTH_DATA_DIR, REFERENCE_FILES

logger = get_logger(__name__)


def parse_sex(value: Sex | str) -> Sex:
    """Coerce a sex value, raising InvalidMeasurement if unrecognized."""
    if isinstance(value, Sex):
        return value
    if isinstance(value, str):
        try:
            return Sex(value.strip().lower())
        except ValueError:
            pass
    raise InvalidMeasurement(
        f"Unrecognized sex {value!r}; expected one of {', '.join(s.value for s in Sex)}"
    )


@dataclass(frozen=True)
class ReferenceRow:
    """LMS parameters at one tabulated age."""
    age_months: float
    L: float
    M: float
    S: float

    @property
    def lms(self) -> LMS:
        return (self.L, self.M, self.S)


@dataclass(frozen=True)
class ReferenceTable:
    """
    LMS rows for one measure, keyed by sex.

    `rows` includes an entry for Sex.OTHER, derived at load time from the
    configured policy.
    """
    measure: Measure
    rows: Mapping[Sex, tuple[ReferenceRow, ...]]
    unit: str = ""
    source: str = ""
    other_sex_reference: str = "average"

    # Lookup columns, built once in __post_init__
    _ages: Mapping[Sex, tuple[float, ...]] = field(init=False, repr=False, compare=False)
    _params: Mapping[Sex, tuple[LMS, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", MappingProxyType(dict(self.rows)))
        object.__setattr__(self, "_ages", MappingProxyType({
            sex: tuple(r.age_months for r in rows) for sex, rows in self.rows.items()
        }))
        object.__setattr__(self, "_params", MappingProxyType({
            sex: tuple(r.lms for r in rows) for sex, rows in self.rows.items()
        }))

    def rows_for(self, sex: Sex | str) -> tuple[ReferenceRow, ...]:
        sex = parse_sex(sex)
        try:
            return self.rows[sex]
        except KeyError:
            raise InvalidMeasurement(f"No {self.measure.value} reference rows for sex {sex.value}") from None

    def age_range(self, sex: Sex | str) -> tuple[float, float]:
        """(first, last) tabulated age in months."""
        rows = self.rows_for(sex)
        return rows[0].age_months, rows[-1].age_months

    def lms(self, sex: Sex | str, age_months: float) -> LMS:
        """Interpolated (L, M, S) at an age in months."""
        sex = parse_sex(sex)
        self.rows_for(sex)
        ages = self._ages[sex]
        if age_months < ages[0] or age_months > ages[-1]:
            logger.debug(
                "Age %.2f months outside %s reference range %.0f-%.0f; clamping",
                age_months, self.measure.value, ages[0], ages[-1],
            )
        return interpolate_lms(ages, self._params[sex], age_months)


@dataclass(frozen=True)
class ReferenceStore:
    """All loaded reference tables, keyed by measure."""
    tables: Mapping[Measure, ReferenceTable]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    @property
    def measures(self) -> list[Measure]:
        return list(self.tables)

    def table(self, measure: Measure | str) -> ReferenceTable:
        measure = Measure(measure)
        try:
            return self.tables[measure]
        except KeyError:
            raise ReferenceDataCorrupt(f"No reference table loaded for {measure.value}") from None


# =============================================================================
# LOADING AND VALIDATION
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_rows(raw_rows: Any, where: str) -> tuple[ReferenceRow, ...]:
    """Validate one sex's rows: [age_months, L, M, S], strictly ascending by age."""
    if not isinstance(raw_rows, list) or not raw_rows:
        raise ReferenceDataCorrupt(f"{where}: expected a non-empty list of rows")

    rows: list[ReferenceRow] = []
    for index, raw in enumerate(raw_rows):
        if not isinstance(raw, (list, tuple)) or len(raw) != 4 or not all(_is_number(v) for v in raw):
            raise ReferenceDataCorrupt(f"{where} row {index}: expected [age_months, L, M, S], got {raw!r}")

        age, L, M, S = (float(v) for v in raw)
        if not all(math.isfinite(v) for v in (age, L, M, S)):
            raise ReferenceDataCorrupt(f"{where} row {index}: non-finite value in {raw!r}")
        if age < 0:
            raise ReferenceDataCorrupt(f"{where} row {index}: negative age {age}")
        if M <= 0:
            raise ReferenceDataCorrupt(f"{where} row {index}: M must be positive, got {M}")
        if S <= 0:
            raise ReferenceDataCorrupt(f"{where} row {index}: S must be positive, got {S}")
        if rows and age <= rows[-1].age_months:
            raise ReferenceDataCorrupt(
                f"{where} row {index}: age {age} does not follow {rows[-1].age_months}"
            )
        rows.append(ReferenceRow(age_months=age, L=L, M=M, S=S))

    return tuple(rows)


def _derive_other(
    male: tuple[ReferenceRow, ...],
    female: tuple[ReferenceRow, ...],
    policy: str,
) -> tuple[ReferenceRow, ...]:
    """
    Reference rows for Sex.OTHER.

    "average" takes the mean of the male and female L, M and S at every
    age tabulated for either sex.
    """
    if policy == "male":
        return male
    if policy == "female":
        return female

    male_ages = tuple(r.age_months for r in male)
    male_params = tuple(r.lms for r in male)
    female_ages = tuple(r.age_months for r in female)
    female_params = tuple(r.lms for r in female)

    rows = []
    for age in sorted(set(male_ages) | set(female_ages)):
        Lm, Mm, Sm = interpolate_lms(male_ages, male_params, age)
        Lf, Mf, Sf = interpolate_lms(female_ages, female_params, age)
        rows.append(ReferenceRow(
            age_months=age,
            L=(Lm + Lf) / 2,
            M=(Mm + Mf) / 2,
            S=(Sm + Sf) / 2,
        ))
    return tuple(rows)


def build_reference_table(
    data: Any,
    other_sex_reference: str = "average",
    origin: str = "<memory>",
) -> ReferenceTable:
    """
    Build a validated ReferenceTable from parsed YAML data.

    Raises:
        ReferenceDataCorrupt: if any structural check fails
        ValueError: if other_sex_reference is not a known policy
    """
    if other_sex_reference not in OTHER_SEX_POLICIES:
        raise ValueError(f"Unknown reference policy for sex 'other': {other_sex_reference!r}")

    if not isinstance(data, dict):
        raise ReferenceDataCorrupt(f"{origin}: expected a mapping at top level")

    try:
        measure = Measure(data.get("measure"))
    except ValueError:
        raise ReferenceDataCorrupt(f"{origin}: unknown measure {data.get('measure')!r}") from None

    sexes = data.get("sexes")
    if not isinstance(sexes, dict):
        raise ReferenceDataCorrupt(f"{origin}: missing 'sexes' mapping")

    rows: dict[Sex, tuple[ReferenceRow, ...]] = {}
    for sex in (Sex.MALE, Sex.FEMALE):
        if sex.value not in sexes:
            raise ReferenceDataCorrupt(f"{origin}: no rows for {sex.value}")
        rows[sex] = _parse_rows(sexes[sex.value], f"{origin} [{sex.value}]")

    unknown = set(sexes) - {Sex.MALE.value, Sex.FEMALE.value}
    if unknown:
        raise ReferenceDataCorrupt(f"{origin}: unexpected sex keys {sorted(map(str, unknown))}")

    rows[Sex.OTHER] = _derive_other(rows[Sex.MALE], rows[Sex.FEMALE], other_sex_reference)

    return ReferenceTable(
        measure=measure,
        rows=rows,
        unit=str(data.get("unit") or ""),
        source=str(data.get("source") or ""),
        other_sex_reference=other_sex_reference,
    )


def load_reference_table(path: Path, other_sex_reference: str = "average") -> ReferenceTable:
    """Load and validate one YAML reference table."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ReferenceDataCorrupt(f"Cannot read reference data {path}: {e}") from e

    table = build_reference_table(data, other_sex_reference, origin=Path(path).name)
    logger.debug(
        "Loaded %s reference from %s (%d male rows, %d female rows)",
        table.measure.value, path, len(table.rows[Sex.MALE]), len(table.rows[Sex.FEMALE]),
    )
    return table


def load_reference_store(
    data_dir: Path | None = None,
    other_sex_reference: str = "average",
) -> ReferenceStore:
    """
    Load every reference table from a directory.

    The BMI table is required. Weight- and height-for-age tables are
    loaded when their files are present.
    """
    data_dir = Path(data_dir) if data_dir else GROWTH_DATA_DIR

    tables: dict[Measure, ReferenceTable] = {}
    for measure_name, filename in REFERENCE_FILES.items():
        measure = Measure(measure_name)
        path = data_dir / filename
        if not path.exists():
            if measure is Measure.BMI:
                raise ReferenceDataCorrupt(f"BMI reference data not found: {path}")
            logger.debug("No %s reference at %s; skipping", measure.value, path)
            continue

        table = load_reference_table(path, other_sex_reference)
        if table.measure is not measure:
            raise ReferenceDataCorrupt(
                f"{filename}: declares measure {table.measure.value}, expected {measure.value}"
            )
        tables[measure] = table

    return ReferenceStore(tables=tables)
