# CUI // SP-CTI
"""php2node: convert PHP projects into Node.js/TypeScript projects."""

__version__ = "1.0.0"
