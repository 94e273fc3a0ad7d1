"""
Unit tests for the release hosting client.

Test individual components in isolation:
- Models, codec and JSON Schema generation
- Validation rules, version and target grammars
- Retry policy decisions
- Transport classification, retries, cancellation and pagination
- Release and artifact selection
"""
