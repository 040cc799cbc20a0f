"""Static English/Hindi text lookup.

``translate`` is a pure function of its key and an explicit locale; there
is no ambient "current language".  Keys are the same identifiers the
front end uses, so API responses can ship labels it understands.
"""

from __future__ import annotations

from typing import Final

from config.languages import normalize_locale

_TRANSLATIONS: Final[dict[str, dict[str, str]]] = {
    "en": {
        # Scheme categories
        "education": "Education",
        "health": "Health",
        "business": "Business",
        "agriculture": "Agriculture",
        "employment": "Employment",
        "social": "Social Welfare",
        "housing": "Housing",
        "other": "Other",
        # Application statuses
        "pending": "Pending",
        "under_review": "Under Review",
        "approved": "Approved",
        "rejected": "Rejected",
        # Dashboard / listings
        "match": "Match",
        "deadlinesThisWeek": "Deadlines This Week",
        "eligibleSchemes": "Eligible Schemes",
        "applicationDeadline": "Application Deadline",
        "active": "Active",
        "deadlinePassed": "Deadline Passed",
        # Eligibility banner
        "youAreEligible": "You are eligible for this scheme!",
        "eligibilityCheck": "Eligibility Check",
        "completeProfile": "Please complete your profile to check eligibility",
        # Notifications
        "newSchemeMatch": "New scheme match: {name}",
        "newSchemeMatchMessage": "Based on your profile you may be eligible for {name}.",
        "applicationStatusChanged": "Application status updated",
        "applicationStatusChangedMessage": "Your application for {name} is now {status}.",
        # Chat assistant
        "chatUnavailable": "I'm sorry, I'm currently unable to help. Please try again later.",
        "chatNotUnderstood": "I'm sorry, I couldn't process your request. Please try again.",
    },
    "hi": {
        "education": "शिक्षा",
        "health": "स्वास्थ्य",
        "business": "व्यापार",
        "agriculture": "कृषि",
        "employment": "रोजगार",
        "social": "सामाजिक कल्याण",
        "housing": "आवास",
        "other": "अन्य",
        "pending": "लंबित",
        "under_review": "समीक्षाधीन",
        "approved": "अनुमोदित",
        "rejected": "अस्वीकृत",
        "match": "मैच",
        "deadlinesThisWeek": "इस सप्ताह की समय सीमा",
        "eligibleSchemes": "पात्र योजनाएं",
        "applicationDeadline": "आवेदन की अंतिम तिथि",
        "active": "सक्रिय",
        "deadlinePassed": "समय सीमा समाप्त",
        "youAreEligible": "आप इस योजना के लिए पात्र हैं!",
        "eligibilityCheck": "पात्रता जांच",
        "completeProfile": "पात्रता जांचने के लिए कृपया अपनी प्रोफ़ाइल पूरी करें",
        "newSchemeMatch": "नई योजना मिली: {name}",
        "newSchemeMatchMessage": "आपकी प्रोफ़ाइल के आधार पर आप {name} के लिए पात्र हो सकते हैं।",
        "applicationStatusChanged": "आवेदन की स्थिति बदली",
        "applicationStatusChangedMessage": "{name} के लिए आपके आवेदन की स्थिति अब {status} है।",
        "chatUnavailable": "माफ करें, मैं अभी आपकी मदद नहीं कर सकता। कृपया बाद में पुनः प्रयास करें।",
        "chatNotUnderstood": "माफ करें, मैं आपका अनुरोध समझ नहीं सका। कृपया पुनः प्रयास करें।",
    },
}


def translate(key: str, locale: str | None, **params: object) -> str:
    """Return the text for *key* in *locale*.

    Falls back to English when the locale or the key is missing from the
    locale's table, and to *key* itself when English lacks it too.
    Keyword arguments are substituted into ``{placeholders}``.
    """
    table = _TRANSLATIONS[normalize_locale(locale)]
    text = table.get(key) or _TRANSLATIONS["en"].get(key, key)
    if params:
        text = text.format(**params)
    return text
