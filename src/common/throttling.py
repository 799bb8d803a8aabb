from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class UserDefaultThrottle(UserRateThrottle):
    rate = "100/min"


class WriteThrottle(UserRateThrottle):
    rate = "100/min"


class CheckoutThrottle(UserRateThrottle):
    rate = "20/min"


class ScanThrottle(UserRateThrottle):
    rate = "600/min"


class ReferralClickThrottle(AnonRateThrottle):
    rate = "30/min"


class AuthThrottle(AnonRateThrottle):
    rate = "10/min"
