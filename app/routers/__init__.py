"""Router package exports."""
from . import affiliates, auth, commissions, customers, dashboard, draws, landing, sales, settings

__all__ = [
	"affiliates",
	"auth",
	"commissions",
	"customers",
	"dashboard",
	"draws",
	"landing",
	"sales",
	"settings",
]
