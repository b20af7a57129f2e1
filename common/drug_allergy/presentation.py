"""Display styling for allergy alert severities."""

from .models import AllergySeverity

SEVERITY_COLORS: dict[AllergySeverity, str] = {
    AllergySeverity.CRITICAL: "bg-red-600 text-white",
    AllergySeverity.SEVERE: "bg-red-100 text-red-800 border-red-300",
    AllergySeverity.MODERATE: "bg-orange-50 text-orange-700 border-orange-200",
    AllergySeverity.MILD: "bg-yellow-50 text-yellow-700 border-yellow-200",
}

DEFAULT_SEVERITY_COLOR = "bg-gray-50 text-gray-700 border-gray-200"


def get_allergy_severity_color(severity: AllergySeverity | str | None) -> str:
    """Get CSS classes for a severity badge; unknown values get neutral gray."""
    try:
        return SEVERITY_COLORS[AllergySeverity(severity)]
    except ValueError:
        return DEFAULT_SEVERITY_COLOR
