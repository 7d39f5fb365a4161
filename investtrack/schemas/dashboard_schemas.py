from pydantic import BaseModel


class DashboardTotals(BaseModel):
    total_firms: int
    total_brokers: int
    total_investors: int
    total_members: int
    total_analysts: int
    total_fund_managers: int
    total_interactions: int
    total_events: int
    total_coverages: int


class LocationTypeCount(BaseModel):
    location_type: str
    count: int


class TopCoverage(BaseModel):
    name: str
    fiscal_year: int
    quarter: int
    tp: float
    recommendation: str


class CountryCount(BaseModel):
    country: str
    count: int


class RegionalFocusCount(BaseModel):
    regional_focus: str
    count: int


class BrokerFirmStats(BaseModel):
    by_location_type: list[LocationTypeCount]
    top_coverages: list[TopCoverage]


class InvestorFirmStats(BaseModel):
    by_location_type: list[LocationTypeCount]


class FirmStats(BaseModel):
    broker: BrokerFirmStats
    investor: InvestorFirmStats


class InvestorMemberStats(BaseModel):
    by_country: list[CountryCount]
    by_regional_focus: list[RegionalFocusCount]


class MemberStats(BaseModel):
    investor: InvestorMemberStats


class DashboardResponse(BaseModel):
    """Aggregate counts and top-N breakdowns"""

    totals: DashboardTotals
    firm_stats: FirmStats
    member_stats: MemberStats
