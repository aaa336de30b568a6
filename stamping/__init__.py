"""
Stamping feature.

Create a visual mark (drawn, typed or uploaded image), place it on pages of a
loaded PDF and export a new PDF with the marks burned into the page content.
"""
