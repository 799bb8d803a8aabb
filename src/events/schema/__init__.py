"""Events schema package.

Schemas are split by area and re-exported here.
"""

from .event import (
    EventAdminSchema,
    EventCloneSchema,
    EventCreateSchema,
    EventDetailSchema,
    EventEditSchema,
    EventInListSchema,
)
from .order import (
    CheckoutSchema,
    OrderAdminSchema,
    OrderItemSchema,
    OrderLineSchema,
    OrderSchema,
    PaymentConfirmSchema,
)
from .pricing import (
    AllocationDriftSchema,
    AllocationEditSchema,
    AllocationInSchema,
    AllocationStatsSchema,
    EventStatsSchema,
    GatekeeperAddSchema,
    PricingLineSchema,
    PricingPlanInSchema,
    PricingPlanSchema,
    PricingSnapshotSchema,
    TicketTypeInSchema,
    TicketTypeSchema,
    TierAllocationSchema,
    TierEditSchema,
    TierInSchema,
    TierSchema,
)
from .referral import (
    PromoCodeCreateSchema,
    PromoCodeEditSchema,
    PromoCodeSchema,
    ReferralClickSchema,
    ReferralCreateSchema,
    ReferralRenameSchema,
    ReferralSchema,
    ReferralStatsSchema,
)
from .ticket import (
    ScanLogSchema,
    ScanRequestSchema,
    ScanResultSchema,
    TicketDetailSchema,
    TicketSchema,
    TicketTransferSchema,
    TransferByEmailSchema,
    TransferByPersonalCodeSchema,
    TransferHistorySchema,
)

__all__ = [
    "AllocationDriftSchema",
    "AllocationEditSchema",
    "AllocationInSchema",
    "AllocationStatsSchema",
    "CheckoutSchema",
    "EventAdminSchema",
    "EventCloneSchema",
    "EventCreateSchema",
    "EventDetailSchema",
    "EventEditSchema",
    "EventInListSchema",
    "EventStatsSchema",
    "GatekeeperAddSchema",
    "OrderAdminSchema",
    "OrderItemSchema",
    "OrderLineSchema",
    "OrderSchema",
    "PaymentConfirmSchema",
    "PricingLineSchema",
    "PricingPlanInSchema",
    "PricingPlanSchema",
    "PricingSnapshotSchema",
    "PromoCodeCreateSchema",
    "PromoCodeEditSchema",
    "PromoCodeSchema",
    "ReferralClickSchema",
    "ReferralCreateSchema",
    "ReferralRenameSchema",
    "ReferralSchema",
    "ReferralStatsSchema",
    "ScanLogSchema",
    "ScanRequestSchema",
    "ScanResultSchema",
    "TicketDetailSchema",
    "TicketSchema",
    "TicketTransferSchema",
    "TicketTypeInSchema",
    "TicketTypeSchema",
    "TierAllocationSchema",
    "TierEditSchema",
    "TierInSchema",
    "TierSchema",
    "TransferByEmailSchema",
    "TransferByPersonalCodeSchema",
    "TransferHistorySchema",
]
