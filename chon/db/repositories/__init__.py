"""Query helpers grouped per domain; every function takes the session first."""
