from collections import Counter

from sqlalchemy.orm import Session

from investtrack.models.firm import FirmType
from investtrack.repositories.dashboard_repository import DashboardRepository
from investtrack.schemas.dashboard_schemas import (
    BrokerFirmStats,
    CountryCount,
    DashboardResponse,
    DashboardTotals,
    FirmStats,
    InvestorFirmStats,
    InvestorMemberStats,
    LocationTypeCount,
    MemberStats,
    RegionalFocusCount,
    TopCoverage,
)

TOP_N = 10


class DashboardService:
    """Builds the aggregate dashboard"""

    def __init__(self, db: Session):
        self.db = db
        self.dashboard_repo = DashboardRepository(db)

    def _location_counts(self, firm_type: FirmType) -> list[LocationTypeCount]:
        return [
            LocationTypeCount(location_type=location_type.value, count=count)
            for location_type, count in self.dashboard_repo.firms_by_location_type(firm_type)
        ]

    def get_dashboard(self) -> DashboardResponse:
        repo = self.dashboard_repo

        totals = DashboardTotals(
            total_firms=repo.count_firms(),
            total_brokers=repo.count_firms(FirmType.BROKER),
            total_investors=repo.count_firms(FirmType.INVESTOR),
            total_members=repo.count_members(),
            total_analysts=repo.count_members_with_designation("Analyst"),
            total_fund_managers=repo.count_members_with_designation("Fund Manager"),
            total_interactions=repo.count_interactions(),
            total_events=repo.count_events(),
            total_coverages=repo.count_coverages(),
        )

        top_coverages = [
            TopCoverage(
                name=name,
                fiscal_year=fiscal_year,
                quarter=quarter,
                tp=float(tp),
                recommendation=recommendation.value,
            )
            for name, fiscal_year, quarter, tp, recommendation in repo.top_coverages(TOP_N)
        ]

        # Country and regional focus live in JSON columns; count in Python
        countries: Counter[str] = Counter()
        regions: Counter[str] = Counter()
        for address, regional_focus in repo.investor_member_profiles():
            if address and address.get("country"):
                countries[address["country"]] += 1
            regions.update(set(regional_focus or []))

        return DashboardResponse(
            totals=totals,
            firm_stats=FirmStats(
                broker=BrokerFirmStats(
                    by_location_type=self._location_counts(FirmType.BROKER),
                    top_coverages=top_coverages,
                ),
                investor=InvestorFirmStats(
                    by_location_type=self._location_counts(FirmType.INVESTOR),
                ),
            ),
            member_stats=MemberStats(
                investor=InvestorMemberStats(
                    by_country=[
                        CountryCount(country=country, count=count)
                        for country, count in countries.most_common(TOP_N)
                    ],
                    by_regional_focus=[
                        RegionalFocusCount(regional_focus=region, count=count)
                        for region, count in regions.most_common(TOP_N)
                    ],
                ),
            ),
        )
