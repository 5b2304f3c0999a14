# Pydantic request schemas and response serializers
