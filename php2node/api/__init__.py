# CUI // SP-CTI
"""php2node HTTP API."""
