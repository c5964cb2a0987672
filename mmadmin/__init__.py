"""mmadmin: administrative command surface for a Mattermost server.

Resolves operator-typed identifiers against the REST API, walks paginated
collections to completion, and joins related records (bot owners) with
partial-failure reporting.
"""

__version__ = "0.1.0"
