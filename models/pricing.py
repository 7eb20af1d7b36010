"""Pricing breakdown for a stay."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PricingBreakdown(BaseModel):
    """
    Itemized price of a stay.

    Derived, never authoritative: amounts are shown exactly as the pricing
    service returned them, even if ``total_amount`` does not equal the sum of
    the parts.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subtotal: float = Field(default=0, ge=0)
    nights: int = Field(default=0, ge=0)
    taxes: float = Field(default=0, ge=0)
    service_fee: float = Field(default=0, ge=0)
    total_amount: float = Field(default=0, ge=0)

    @classmethod
    def zero(cls) -> "PricingBreakdown":
        return cls()

    @classmethod
    def flat_rate(cls, base_rate: float, nights: int) -> "PricingBreakdown":
        """Fallback pricing: base rate times nights, no taxes or fees."""
        subtotal = base_rate * nights
        return cls(
            subtotal=subtotal,
            nights=nights,
            taxes=0,
            service_fee=0,
            total_amount=subtotal,
        )

    @property
    def is_resolved(self) -> bool:
        return self.nights > 0
