"""SIXKUL: school extracurricular management API."""
