"""Macro definition data bundled with texrecode."""
