"""The warehouse tables that the data explorer may read.

Schema and table names that end up in SQL are always taken from these
entries, never from a request.
"""
from dataclasses import dataclass
from typing import Dict, Final, Optional, Tuple

from sqlalchemy import TableClause, table


@dataclass(frozen=True)
class AllowlistEntry:
    """A readable warehouse table."""

    schema: str
    table: str
    label: str
    description: str

    @property
    def key(self) -> Tuple[str, str]:
        """The (schema, table) pair that identifies this entry."""
        return (self.schema, self.table)

    @property
    def table_clause(self) -> TableClause:
        """A lightweight table construct for building queries."""
        return table(self.table, schema=self.schema)

    def as_dict(self) -> Dict[str, str]:
        """The entry's public fields."""
        return {
            "schema": self.schema,
            "table": self.table,
            "label": self.label,
            "description": self.description,
        }


ALLOWED_TABLES: Final[Tuple[AllowlistEntry, ...]] = (
    AllowlistEntry("odl", "comment_sentiments", "Comment Sentiments", "Sentiment analysis results for post comments"),
    AllowlistEntry("odl", "comment_sentiments_v2", "Comment Sentiments v2", "Updated sentiment analysis with improved model accuracy"),
    AllowlistEntry("odl", "dim_comments", "Comments (Dimension)", "All Facebook post comments with text, author, and timestamps"),
    AllowlistEntry("odl", "dim_date", "Date (Dimension)", "Date dimension table for time-based analysis and joins"),
    AllowlistEntry("odl", "dim_geographies", "Geographies (Dimension)", "Geographic regions for audience location analysis"),
    AllowlistEntry("odl", "dim_metrics", "Metrics (Dimension)", "Metric definitions and metadata for engagement tracking"),
    AllowlistEntry("odl", "dim_page_categories", "Page Categories (Dimension)", "Facebook page category classifications"),
    AllowlistEntry("odl", "dim_pages", "Pages (Dimension)", "Connected Facebook pages with metadata and status"),
    AllowlistEntry("odl", "dim_posts", "Posts (Dimension)", "All Facebook posts with text, media type, timestamps, and URLs"),
    AllowlistEntry("odl", "dim_reaction_types", "Reaction Types (Dimension)", "Facebook reaction type definitions (like, love, wow, etc.)"),
    AllowlistEntry("odl", "fact_page_daily_demographics_insights", "Page Demographics (Daily)", "Daily page-level demographics: age, gender, location breakdowns"),
    AllowlistEntry("odl", "fact_page_daily_insights", "Page Insights (Daily)", "Daily page-level metrics: reach, impressions, followers, engagement"),
    AllowlistEntry("odl", "fact_post_daily_insights", "Post Insights (Daily)", "Daily post-level metrics: reach, impressions, clicks, reactions"),
    AllowlistEntry("odl", "gpt_model_prediction", "GPT Model Predictions", "GPT-generated virality and engagement predictions per post"),
    AllowlistEntry("odl", "gpt_post_recommendation", "GPT Post Recommendations", "GPT-generated content strategy recommendations per post"),
    AllowlistEntry("odl", "sentiments_overall", "Overall Sentiments", "Aggregated sentiment scores across all posts and comments"),
    AllowlistEntry("public", "artemis_fb_connections", "FB Connections", "Connected Facebook pages from the website connect flow"),
    AllowlistEntry("public", "ml_comment_sentiment_results", "ML Comment Sentiments", "ML pipeline sentiment classification results for comments"),
    AllowlistEntry("rdl", "page_daily_insights", "Page Daily Insights (RDL)", "Refined daily page metrics after transformation and cleaning"),
    AllowlistEntry("rdl", "page_demographics_insights", "Page Demographics (RDL)", "Refined page demographics data after transformation"),
    AllowlistEntry("rdl", "page_info", "Page Info (RDL)", "Refined page metadata: name, category, followers, verification"),
    AllowlistEntry("rdl", "page_posts", "Page Posts (RDL)", "Refined posts data with cleaned text and normalized fields"),
    AllowlistEntry("rdl", "post_comments", "Post Comments (RDL)", "Refined comments data with cleaned text and threading"),
    AllowlistEntry("rdl", "post_daily_insights", "Post Daily Insights (RDL)", "Refined daily post metrics after transformation and cleaning"),
    AllowlistEntry("rdl", "post_reactions", "Post Reactions (RDL)", "Refined post reactions data with reaction type breakdowns"),
)

_BY_KEY: Final[Dict[Tuple[str, str], AllowlistEntry]] = {
    entry.key: entry for entry in ALLOWED_TABLES
}


def find_table(schema: object, table_name: object) -> Optional[AllowlistEntry]:
    """Look up the allowlist entry for a schema and table, if there is one."""
    if not isinstance(schema, str) or not isinstance(table_name, str):
        return None
    return _BY_KEY.get((schema, table_name))
