"""
Wine-list text parsing.

Turns OCR / vision transcriptions of a restaurant wine list into priced
wine line items with a keyword-based style classification.
"""
