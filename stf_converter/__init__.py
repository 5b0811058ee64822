"""STF Converter: codec, converters, and editing session for STF string tables.

WHY: STF files hold identifier-keyed, localized string resources in a
compact binary layout that no text tool can open. This package decodes
them into a well-typed model, converts them to and from reviewable
formats (JSON, CSV, plain text), and provides a headless editing session
for hosts that let users change tables.

HOW: Three layers: core (model + byte-exact codec), converters
(pluggable formatters and table loaders), and surfaces (CLI, HTTP API,
editing session). Each layer is independently testable.

RULES:
- All formatters consume the same STFData model
- Adding a new export format = one new formatter module, no core changes
- Surfaces reach the bytes only through core.decode / core.encode
"""

__version__ = "0.1.0"
