"""Fake ConfigObserver for use in tests — records events without mocking."""


class FakeConfigObserver:
    def __init__(self) -> None:
        self.loaded: list[dict[str, str]] = []
        self.overrides: list[str] = []

    def config_loaded(self, source: str, domain: str) -> None:
        self.loaded.append({"source": source, "domain": domain})

    def config_domain_overridden(self, domain: str) -> None:
        self.overrides.append(domain)
