"""Census ACS 5-year adapters for congressional-district tables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from atlas_gateway.proxy.adapter import ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.classify import QuirkRule
from atlas_gateway.proxy.query import Credential, CredentialPlacement, UpstreamQuery, build_url
from atlas_gateway.proxy.results import FailureKind, UpstreamFailure

# Already in on-the-wire form; passed through build_url untouched.
DISTRICT_GEOGRAPHY = (("for", "congressional%20district:*"), ("in", "state:*"))
LITERAL_PARAMS = ("get", "for", "in")


@dataclass(frozen=True)
class CensusTable:
    """One variable set to try: dataset path under the vintage, and labels."""

    year: str
    dataset: str
    variables: tuple[str, ...]
    vintage: str
    table: str


LANGUAGE_VARIABLES = (
    "NAME",
    "C16001_001E",
    "C16001_015E",
    "C16001_017E",
    "C16001_030E",
    "C16001_032E",
)

# Tried in order; the first table that answers wins.
LANGUAGE_TABLES = (
    CensusTable("2022", "acs/acs5", LANGUAGE_VARIABLES, "2022", "C16001"),
    CensusTable("2021", "acs/acs5", LANGUAGE_VARIABLES, "2021", "C16001"),
    CensusTable("2023", "acs/acs5", LANGUAGE_VARIABLES, "2023", "C16001"),
    CensusTable(
        "2022",
        "acs/acs5",
        ("NAME", "B16004_001E", "B16004_067E", "B16004_068E", "B16004_069E"),
        "2022-B16004",
        "B16004",
    ),
    CensusTable(
        "2022", "acs/acs5/profile", ("NAME", "DP02_0113E", "DP02_0114E"), "2022-DP02", "DP02"
    ),
)

VERIFY_TABLE = CensusTable("2022", "acs/acs5", ("NAME", "B02015_002E"), "2022", "B02015")


def _is_row_grid(parsed: Any) -> bool:
    return isinstance(parsed, list) and all(isinstance(row, list) for row in parsed)


CENSUS_QUIRKS = (
    QuirkRule(
        name="not a row grid",
        predicate=lambda text, parsed: not _is_row_grid(parsed),
        kind=FailureKind.MALFORMED,
        status=502,
    ),
)


class CensusAdapter(ProviderAdapter):
    label = "Census"
    quirks = CENSUS_QUIRKS
    credential = Credential(CredentialPlacement.QUERY, query_param="key")
    tables: tuple[CensusTable, ...] = ()

    @property
    def timeout(self) -> float:
        return self.settings.census_timeout

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        return ProxyRequest(selector=self.name, api_key=self.settings.census_api_key)

    def table_url(self, table: CensusTable, api_key: str) -> str:
        base = self.settings.census_base_url.rstrip("/")
        params = [("get", ",".join(table.variables)), *DISTRICT_GEOGRAPHY]
        params.extend(self.credential.query_params(api_key))
        return build_url(f"{base}/{table.year}/{table.dataset}", params, literal=LITERAL_PARAMS)

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        return [
            UpstreamQuery("GET", self.table_url(t, request.api_key), self.timeout, label=t.vintage)
            for t in self.tables
        ]

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        table = next(t for t in self.tables if t.vintage == query.label)
        return {"data": body, "vintage": table.vintage, "table": table.table}


class CensusLanguageAdapter(CensusAdapter):
    """Language spoken at home, falling back across vintages and tables."""

    name = "language"
    tables = LANGUAGE_TABLES
    exhausted_message = "All Census language tables returned errors"


class CensusVerifyAdapter(CensusAdapter):
    """Asian Indian population (B02015), used to cross-check district totals."""

    name = "verify"
    tables = (VERIFY_TABLE,)

    def failure_message(self, failure: UpstreamFailure) -> str:
        return f"Census API returned {failure.upstream_status}"
