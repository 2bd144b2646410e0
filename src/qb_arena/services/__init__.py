"""Services for QB Arena: storage, matchmaking, rating updates, import and reporting."""
