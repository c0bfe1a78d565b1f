"""BigQuery Analysis Tools — admission-controlled query access for MCP clients.

The package exposes two operations over BigQuery: a dry-run cost estimate and
a validated execution that refuses mutating statements and queries scanning
1 TB or more. The MCP server and the CLI are thin layers over
`bigquery_analysis.admission`.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
