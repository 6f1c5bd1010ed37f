"""
Application Services.

Orchestrate the domain against the repository and audit ports. Every
state-changing operation loads the project, mutates the aggregate,
saves it once and writes the audit entry inside one atomic block.
"""
