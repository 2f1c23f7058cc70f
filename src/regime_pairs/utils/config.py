"""Configuration utilities using Pydantic models."""

from pathlib import Path

import yaml as pyyaml  # type: ignore
from pydantic import BaseModel, Field, model_validator  # type: ignore


class StrategyConfig(BaseModel):
    """Parameters of the regime-adaptive pairs strategy."""

    initial_capital: float = Field(default=100_000.0, gt=0.0)
    commission: float = Field(default=0.001, ge=0.0, lt=1.0)  # доля от объема
    slippage: float = Field(default=0.0005, ge=0.0, lt=1.0)  # доля от объема
    correlation_window: int = Field(default=30, ge=2)
    high_corr_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)
    low_corr_threshold: float = Field(default=0.3, ge=-1.0, le=1.0)
    zscore_entry_threshold: float = Field(default=2.5, gt=0.0)
    zscore_exit_threshold: float = Field(default=1.0, ge=0.0)
    stop_loss_threshold: float = Field(default=0.05, gt=0.0)
    max_position_size: float = Field(default=0.5, gt=0.0, le=1.0)
    mean_reversion_leverage: float = Field(default=2.5, gt=0.0)
    momentum_leverage: float = Field(default=4.0, gt=0.0)
    transition_leverage: float = Field(default=1.5, gt=0.0)

    min_position_size: float = Field(default=1000.0, ge=0.0)
    max_holding_period: int = Field(default=30, ge=1)
    momentum_entry_threshold: float | None = Field(default=None, gt=0.0)
    stop_loss_zscore: float | None = Field(default=None, gt=0.0)
    momentum_profit_target: float | None = Field(default=None, gt=0.0)
    annualizing_factor: int = Field(default=365, ge=1)

    # -------- Validators --------
    @model_validator(mode="after")
    def _validate_thresholds(self):  # type: ignore
        """Validate threshold ordering."""
        if self.low_corr_threshold >= self.high_corr_threshold:
            raise ValueError("`low_corr_threshold` must be less than `high_corr_threshold`")

        if self.zscore_exit_threshold >= self.zscore_entry_threshold:
            raise ValueError("`zscore_entry_threshold` must be greater than `zscore_exit_threshold`")

        if self.stop_loss_zscore is not None and self.stop_loss_zscore <= self.zscore_entry_threshold:
            raise ValueError("`stop_loss_zscore` must be greater than `zscore_entry_threshold`")

        return self


class DataConfig(BaseModel):
    """Price sources for the two legs."""

    prices_a: str | None = None
    prices_b: str | None = None
    column_a: str | None = None
    column_b: str | None = None
    name_a: str = "A"
    name_b: str = "B"


class LoggingConfig(BaseModel):
    """Logging settings."""

    trade_details: bool = False
    debug_level: str = "INFO"
    log_file: str | None = None


class AppConfig(BaseModel):
    """Top-level application configuration."""

    results_dir: Path = Path("results")
    data: DataConfig = Field(default_factory=DataConfig)
    backtest: StrategyConfig = Field(default_factory=StrategyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: Path | str) -> AppConfig:
    """Load configuration from a YAML file.

    Parameters
    ----------
    path : Path
        Path to the YAML configuration file.

    Returns
    -------
    AppConfig
        Parsed configuration object.
    """
    path = Path(path) if isinstance(path, str) else path
    with path.open("r", encoding="utf-8") as f:
        raw_cfg = pyyaml.safe_load(f) or {}
    return AppConfig(**raw_cfg)
