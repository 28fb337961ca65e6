"""Pure helpers shared by the web layer (no database access)."""
