"""
CV Job Optimizer - Core Package.

This package contains modules for:
- Building the analysis prompt sent to the language model
- Parsing the model's JSON reply into an analysis result
- Rendering the improved CV (or a full analysis report) to PDF
- Storing uploaded CVs and generated documents
"""

__version__ = "1.0.0"
