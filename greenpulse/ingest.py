from __future__ import annotations
import logging
import pandas as pd
from typing import Any, Iterable, Mapping, Union

from pydantic import ValidationError

from . import canon, exceptions, utils, validate
from .types import BuildingRecord, EnergyFrame

logger = logging.getLogger(__name__)

RecordLike = Union[BuildingRecord, Mapping[str, Any]]


def _auto_rename(df: pd.DataFrame) -> pd.DataFrame:
    new = df.copy()

    # 1) If index is already datetime-like (or named like one), just name it 'timestamp'
    if isinstance(new.index, pd.DatetimeIndex) or (
        str(new.index.name).lower() in canon.COMMON_TIMESTAMP_NAMES
    ):
        new.index.name = canon.INDEX_NAME
    else:
        # 2) Otherwise try to find a timestamp column and set as index
        cols = {str(c).lower(): c for c in new.columns}
        tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
        if tcol is None:
            raise exceptions.InvalidResponse(
                "No timestamp column found and index is not datetime. "
                "Expected one of: timestamp, t_start, time, ts, datetime, date."
            )
        new = new.rename(columns={tcol: canon.INDEX_NAME}).set_index(canon.INDEX_NAME)

    # 3) API field names → frame columns (only when the target isn't present)
    for src, dst in canon.FIELD_MAP.items():
        if dst not in new.columns and src in new.columns:
            new = new.rename(columns={src: dst})

    return new


def from_dataframe(df: pd.DataFrame, *, tz: str = canon.DEFAULT_TZ) -> EnergyFrame:
    """
    Normalise a DataFrame of readings into an EnergyFrame:
      - index: tz-aware 'timestamp', ascending, unique (last duplicate wins)
      - columns: actual, predicted (float, NaN when absent)
    Rows with neither value are dropped.
    """
    df = _auto_rename(df)

    if "actual" not in df.columns and "predicted" not in df.columns:
        raise exceptions.InvalidResponse(
            "Missing both 'actual'/'meter_reading' and 'predicted'/'predicted_meter_reading'."
        )
    for col in canon.REQUIRED_COLS:
        if col not in df.columns:
            df = df.assign(**{col: float("nan")})

    if not isinstance(df.index, pd.DatetimeIndex):
        parsed = utils.safe_localize_series(df.index.to_series(), tz)
        bad = parsed.isna().to_numpy()
        if bad.any():
            raise exceptions.InvalidResponse(
                f"{int(bad.sum())} unparseable timestamp(s), e.g. {df.index[bad][0]!r}."
            )
        df = df.set_axis(pd.DatetimeIndex(parsed, name=canon.INDEX_NAME), axis=0)

    df.index.name = canon.INDEX_NAME
    df = utils.ensure_tz_aware_index(df, tz)

    out = df[canon.REQUIRED_COLS].apply(pd.to_numeric, errors="coerce").astype(float)
    out = out.dropna(how="all").sort_index(kind="stable")
    dupes = out.index.duplicated(keep="last")
    if dupes.any():
        logger.debug("Dropping %d duplicate timestamp(s)", int(dupes.sum()))
        out = out[~dupes]

    out = utils.as_energy_frame(out)
    validate.assert_series(out)
    return out


def parse_records(records: Iterable[RecordLike]) -> list[BuildingRecord]:
    try:
        return [
            r if isinstance(r, BuildingRecord) else BuildingRecord.model_validate(r)
            for r in records
        ]
    except ValidationError as e:
        raise exceptions.InvalidResponse(f"Malformed building record: {e}") from e
    except TypeError as e:
        raise exceptions.InvalidResponse(f"Building records must be objects: {e}") from e


def from_records(records: Iterable[RecordLike], *, tz: str = canon.DEFAULT_TZ) -> EnergyFrame:
    """
    Parse API building records ({timestamp, meter_reading, predicted_meter_reading, ...})
    into an EnergyFrame. An empty payload returns an empty frame.
    """
    parsed = parse_records(records)
    if not parsed:
        return utils.empty_energy_frame(tz)

    raw = pd.DataFrame(
        {
            canon.INDEX_NAME: [r.timestamp for r in parsed],
            "actual": [r.meter_reading for r in parsed],
            "predicted": [r.predicted_meter_reading for r in parsed],
        }
    ).set_index(canon.INDEX_NAME)
    return from_dataframe(raw, tz=tz)
