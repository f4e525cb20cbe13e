"""
Business rules and constants for the salon workflow.
Separates domain presets from the trackers that use them.
"""

from typing import Dict, List

# Service templates offered on the new-appointment form
SERVICE_TEMPLATES: Dict[str, Dict[str, str]] = {
    'rootTouchUp': {
        'label': 'Root touch-up',
        'default_formula': 'Permanent color, natural level + gray coverage at roots only.',
        'default_notes': 'Focus on regrowth only. Blend into mid-lengths if needed, avoid overlapping on ends.',
    },
    'fullHighlight': {
        'label': 'Full highlight',
        'default_formula': 'Foil highlights, fine weaves, lightener + bond builder, mid to high lift.',
        'default_notes': 'Full head foils, focus on brightness around face and crown. Tone after lift reaches desired level.',
    },
    'balayage': {
        'label': 'Balayage / lived-in',
        'default_formula': 'Hand-painted lightener on mid-lengths to ends, soft blended root.',
        'default_notes': 'Soft, low-maintenance blend. Keep depth at root, brightest toward ends. Great for 10-12 week maintenance.',
    },
    'tonerGloss': {
        'label': 'Toner / gloss',
        'default_formula': 'Demi-permanent gloss to refine tone and add shine, mid-lengths and ends.',
        'default_notes': 'Refresh tone and shine between lightening services. Watch timing on porous ends.',
    },
    'silkPress': {
        'label': 'Silk press',
        'default_formula': 'Moisturizing shampoo + deep conditioner, heat protectant, light finishing serum.',
        'default_notes': 'Full cleanse and deep condition. Blow dry with tension, press in small sections. Avoid heavy oils at roots.',
    },
}

# Rebook intervals in weeks per service template
REBOOK_WEEKS: Dict[str, int] = {
    'rootTouchUp': 6,
    'fullHighlight': 10,
    'balayage': 12,
    'tonerGloss': 4,
    'silkPress': 3,
}
DEFAULT_REBOOK_WEEKS = 6
DEFAULT_REBOOK_TIME = "10:00"

# Processing timers longer than a full day are rejected
MAX_TIMER_MINUTES = 24 * 60

# Appointment statuses
APPOINTMENT_STATUSES = ('booked', 'completed', 'no-show')
STATUS_LABELS: Dict[str, str] = {
    'booked': 'Booked',
    'completed': 'Completed',
    'no-show': 'No-show',
}

AFTERCARE_LINES: List[str] = [
    "Use sulfate-free shampoo and conditioner.",
    "Avoid hot tools or keep heat low with heat protectant.",
    "Schedule a refresh or toner in 6-8 weeks.",
]

# Device storage keys
APPOINTMENTS_STORAGE_KEY = "aiHairAssistant_clients_v1"
PRO_STATUS_STORAGE_KEY = "stylegenie_pro"
EMAIL_STORAGE_KEY = "stylegenie_email"
APPOINTMENTS_SCHEMA_VERSION = 2

# Consultation defaults
PLACEHOLDER = "N/A"
DEFAULT_CLIENT_LABEL = "this client"
DEFAULT_SERVICE_LABEL = "a hair service"
