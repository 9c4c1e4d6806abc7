"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks the feature packages use: DB wiring,
settings, logging, the error taxonomy, and the two file-backed stores
(id counter and the delimited mirror). Keep movie SQL and use-case logic
in `movies/` and interval logic in `producers/`.
"""
