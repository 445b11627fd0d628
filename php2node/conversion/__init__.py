# CUI // SP-CTI
"""php2node conversion pipeline.

parser adapter -> AST transformer -> code printer for the local path,
remote delegate for the AI path, file classifier for output placement and
the converter orchestrating whole projects.
"""
