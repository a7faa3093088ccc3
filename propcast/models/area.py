from dataclasses import dataclass

DEFAULT_AREA_CODE = "DEFAULT"


@dataclass(frozen=True)
class AreaProfile:
    """Baseline market statistics for one postcode area."""
    area_code: str
    region: str
    base_price: int  # GBP
    growth_rate: float  # % per year
    yield_percent: float  # gross rental yield %
    risk_factor: float  # 1.0 = national average

    @property
    def is_default(self) -> bool:
        return self.area_code == DEFAULT_AREA_CODE

    @property
    def coverage(self) -> str:
        return "estimated" if self.is_default else "detailed"
