"""
Home-page content: defaults for a fresh install and section-wise updates.

Section keys are the public (camelCase) names; SECTION_COLUMNS maps them
onto HomeConfig columns.
"""

from copy import deepcopy
from typing import Any, Dict

SECTION_COLUMNS = {
    "siteSettings": "site_settings",
    "heroSection": "hero_section",
    "featuredPackagesSection": "featured_packages_section",
    "testimonialsSection": "testimonials_section",
    "aboutSection": "about_section",
    "contactSection": "contact_section",
    "seo": "seo",
}

DEFAULT_HOME_CONFIG: Dict[str, Dict[str, Any]] = {
    "siteSettings": {
        "logo": "",
        "socialMediaLinks": [],
    },
    "heroSection": {
        "heading": "Explore the Beauty of India",
        "subheading": "Discover amazing travel experiences",
        "backgroundImage": "/images/default-hero.jpg",
        "ctaText": "Explore Packages",
        "ctaLink": "/packages",
    },
    "featuredPackagesSection": {
        "heading": "Featured Packages",
        "subheading": "Our most popular travel experiences",
        "packageIds": [],
    },
    "testimonialsSection": {
        "heading": "What Our Customers Say",
        "subheading": "Read testimonials from our satisfied travelers",
        "testimonials": [],
    },
    "aboutSection": {
        "heading": "About Us",
        "content": "We are a travel company dedicated to providing exceptional travel experiences in India.",
        "image": "/images/default-about.jpg",
    },
    "contactSection": {
        "heading": "Contact Us",
        "subheading": "Get in touch with our team",
        "email": "contact@example.com",
        "phone": "+91 1234567890",
        "address": "New Delhi, India",
    },
    "seo": {
        "title": "Bhraman - Explore India",
        "description": "Discover amazing travel experiences in India",
        "keywords": ["travel", "india", "tourism", "packages"],
    },
}

# Sections whose list payload replaces the stored list and whose headings
# are only overwritten by non-empty values
_LIST_SECTIONS = {
    "testimonialsSection": "testimonials",
    "seo": "keywords",
}


def default_sections() -> Dict[str, Dict[str, Any]]:
    return deepcopy(DEFAULT_HOME_CONFIG)


def merge_section(name: str, current: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(current or {})
    if name not in _LIST_SECTIONS:
        merged.update(update)
        return merged

    list_key = _LIST_SECTIONS[name]
    for key, value in update.items():
        if key == list_key:
            if value is not None:
                merged[key] = list(value)
        elif value:
            merged[key] = value
    return merged


def merge_sections(current: Dict[str, Dict[str, Any]], update: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Apply a PATCH body. Unknown keys are ignored, sections that are not
    mappings are skipped, untouched sections are returned as they were.
    """
    result = {name: dict(current.get(name) or {}) for name in SECTION_COLUMNS}
    for name, section in update.items():
        if name not in SECTION_COLUMNS or not isinstance(section, dict):
            continue
        result[name] = merge_section(name, result[name], section)
    return result
