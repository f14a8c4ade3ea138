"""RoofReport Cloud Functions.

This package contains the Python Cloud Functions for the RoofReport
roofing estimate and report pipeline.

Architecture:
- Cost Estimator: table-driven regional cost breakdown
- 4 Role Assemblers: Homeowner, Contractor, Inspector, Insurance Adjuster
- Renderer: draw commands, layout pass, WeasyPrint PDF writer
- Report Storage: base64 PDF records in Firestore
"""

__version__ = "1.0.0"



# RoofReport Python Cloud Functions
