from decouple import config

STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="sk_test_...")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="whsec_...")

# Dotted path of the events.service.payment_provider.PaymentProvider used for online checkouts.
PAYMENT_PROVIDER_CLASS = config(
    "PAYMENT_PROVIDER_CLASS", default="events.service.payment_provider.StripePaymentProvider"
)
