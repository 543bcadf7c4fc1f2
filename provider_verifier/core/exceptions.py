from __future__ import annotations


class VerifierError(Exception):
    pass


class BrokerQueryError(VerifierError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"broker query failed: GET {url}: {reason}")
        self.url = url
        self.reason = reason


class ProviderStartupError(VerifierError):
    pass


class VerificationEngineError(VerifierError):
    pass


class VerificationFailedError(VerifierError):
    def __init__(self, detail: str, contract_urls: list[str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.contract_urls = contract_urls or []
