"""
Data processing for the greenhouse quantum-yield study:
spreadsheet conversion (xlsx_to_csv) and the alignment/feature
pipeline (preprocessing).
"""
