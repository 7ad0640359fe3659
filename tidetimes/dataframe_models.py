"""Pandera DataFrame models for validating internal data structures."""

import pandas as pd
import pandera.pandas as pa
import pandera.typing as pa_typing


class HeightSeriesDataModel(pa.DataFrameModel):
    """Pandera DataFrameModel for a normalized tide height series."""

    time: pa_typing.Index[pa.DateTime] = pa.Field(
        nullable=False, unique=True, check_name=True
    )
    height: pa_typing.Series[float] = pa.Field(nullable=False)

    @pa.dataframe_check(error="DataFrame must have at least one row")
    def check_not_empty(cls, df: pd.DataFrame) -> bool:
        """Check that the dataframe is not empty."""
        return not df.empty

    @pa.check("time", error="Index not sorted")
    def check_index_monotonic(cls, idx: pd.Index) -> bool:
        return bool(idx.is_monotonic_increasing)

    @pa.check("time", error="Index must be timezone naive")
    def check_index_tz_naive(cls, idx: pd.Index) -> bool:
        return idx.dt.tz is None

    class Config:
        """Pandera model configuration."""

        strict = True
        coerce = False
