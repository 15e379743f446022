"""
Personas, user preferences and taste-profile questionnaires.

Validation and mapping only; storage lives outside this service.
"""
