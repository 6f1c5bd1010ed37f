"""
Compliance Domain - certification packs.

A project may carry several certification packs (CE, ES-TRIN, Lloyds, ...).
Each pack holds chapters, chapters hold sections, and both hold checklist
items and attachments. Packs, chapters and sections each move DRAFT -> FINAL
independently; validation is advisory and never blocks finalization.
"""
