"""
Wizard windows for the MoKee setup wizard.
"""
