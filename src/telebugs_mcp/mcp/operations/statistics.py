# src/telebugs_mcp/mcp/operations/statistics.py
"""Report volume statistics from the pre-aggregated report_aggregates table."""

from sqlalchemy import distinct, func, select

from telebugs_mcp.contracts import PeriodType, PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.schema import groups_table, report_aggregates_table
from telebugs_mcp.core.tracker.scope import effective_scope
from telebugs_mcp.mcp.operations.common import in_scope
from telebugs_mcp.mcp.types import PeriodRecord, StatisticsResult

TOP_GROUPS_SHOWN = 10


def get_statistics(
    db: TrackerDB,
    ctx: PrincipalContext,
    *,
    project_id: int | None = None,
    period: str = "day",
    limit: int = 30,
) -> StatisticsResult:
    """Report counts per period plus the highest-volume error groups.

    The newest ``limit`` periods are selected, then returned oldest first so
    they read as a time series. ``total_reports`` sums the returned periods;
    ``unique_error_groups`` counts every group with aggregates of this period
    type in scope. That includes groups beyond the ``TOP_GROUPS_SHOWN`` listed
    in ``top_error_groups`` and groups seen only in periods older than the
    newest ``limit``, so it can exceed ``len(top_error_groups)``.
    """
    scope = effective_scope(ctx.project_ids, project_id)
    if not scope:
        return {
            "statistics": {
                "period": period,
                "total_reports": 0,
                "unique_error_groups": 0,
                "periods": [],
                "top_error_groups": [],
            }
        }

    agg = report_aggregates_table.c
    conditions = (
        in_scope(agg.project_id, scope),
        agg.period_type == int(PeriodType.from_name(period)),
    )

    newest_first = db.fetch_all(
        select(
            agg.period_key,
            func.sum(agg["count"]).label("report_count"),
            func.count(distinct(agg.group_id)).label("error_group_count"),
        )
        .where(*conditions)
        .group_by(agg.period_key)
        .order_by(agg.period_key.desc())
        .limit(limit)
    )
    periods: list[PeriodRecord] = [
        {
            "period_key": row.period_key,
            "report_count": int(row.report_count or 0),
            "error_group_count": row.error_group_count,
        }
        for row in reversed(newest_first)
    ]

    unique_groups = db.fetch_count(select(func.count(distinct(agg.group_id))).where(*conditions))

    volume = func.sum(agg["count"]).label("volume")
    top_groups = db.fetch_all(
        select(agg.group_id, groups_table.c.error_type, groups_table.c.error_message, volume)
        .select_from(report_aggregates_table.join(groups_table, groups_table.c.id == agg.group_id))
        .where(*conditions)
        .group_by(agg.group_id, groups_table.c.error_type, groups_table.c.error_message)
        .order_by(volume.desc(), agg.group_id.desc())
        .limit(TOP_GROUPS_SHOWN)
    )

    return {
        "statistics": {
            "period": period,
            "total_reports": sum(p["report_count"] for p in periods),
            "unique_error_groups": unique_groups,
            "periods": periods,
            "top_error_groups": [
                {
                    "group_id": row.group_id,
                    "error_type": row.error_type,
                    "error_message": row.error_message,
                    "count": int(row.volume or 0),
                }
                for row in top_groups
            ],
        }
    }
