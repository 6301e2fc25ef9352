from __future__ import annotations

import re
from typing import Mapping, Optional

from planyt.utils.config import load_settings


def build_forecast_query(
    start_date: str,
    end_date: str,
    product: Optional[str] = None,
    table: str = "sample_sales",
    schema: Optional[str] = None,
) -> str:
    """
    Build the forecast aggregation query over the sales table.

    Daily quantity/revenue per product from `@start_date` up to, but not
    including, `@end_date`, joined with each product's revenue sum and mean. Values are bound as named
    parameters by the query engine; only the table path is inlined.
    """
    schema = schema or load_settings().forecast_schema
    product_filter = "AND product = @product" if product else ""

    return f"""
    WITH historical AS (
      SELECT
        CAST(sale_date AS DATE) AS sale_date,
        product,
        SUM(quantity) AS total_quantity,
        SUM(revenue) AS total_revenue
      FROM {schema}."{table}"
      WHERE sale_date >= @start_date AND sale_date < @end_date
        {product_filter}
      GROUP BY CAST(sale_date AS DATE), product
    ),
    summary AS (
      SELECT
        product,
        SUM(total_revenue) AS revenue_sum,
        AVG(total_revenue) AS revenue_avg
      FROM historical
      GROUP BY product
    )
    SELECT
      h.sale_date,
      h.product,
      h.total_quantity,
      h.total_revenue,
      s.revenue_sum AS forecast_sum,
      s.revenue_avg AS forecast_mean
    FROM historical h
    JOIN summary s ON h.product = s.product
    ORDER BY h.sale_date
    """


def render_sql_template(template: str, replacements: Mapping[str, str]) -> str:
    """Replace `{{ token }}` placeholders in a SQL template file."""
    sql = template
    for token, value in replacements.items():
        sql = re.sub(r"{{\s*" + re.escape(token) + r"\s*}}", lambda _m: str(value), sql)
    return sql
