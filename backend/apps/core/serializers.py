"""
Base serializer for submitted forms.
"""

from collections.abc import Mapping

from rest_framework import serializers

from .exceptions import ValidationFailed


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


class FormSerializer(serializers.ModelSerializer):
    """
    ModelSerializer for submitted forms.

    Fields listed in ``optional_fields`` may be left out, sent empty or sent
    as null; all three are stored as None (a partial update only touches the
    fields it was sent). Model limits (max_length, choices, digits) are
    checked by the generated fields, domain rules by the ``validate_<field>``
    hooks of each subclass.

    Usage:
        cleaned = DonorRegistrationCreateSerializer.clean(request.data)
    """

    optional_fields = ()

    def to_internal_value(self, data):
        blanked = []
        if isinstance(data, Mapping):
            blanked = [f for f in self.optional_fields if f in data and _is_blank(data[f])]
            data = {key: value for key, value in data.items() if key not in blanked}

        attrs = super().to_internal_value(data)
        for field in self.optional_fields:
            if field in blanked or (field not in attrs and not self.partial):
                attrs[field] = None
        return attrs

    @classmethod
    def clean(cls, data, **kwargs) -> dict:
        """Validate ``data`` and return the values to store. Raises ValidationFailed."""
        serializer = cls(data=data, **kwargs)
        if not serializer.is_valid():
            raise ValidationFailed.from_serializer_errors(serializer.errors)
        return dict(serializer.validated_data)


def raise_if_invalid(result):
    """Turn a validator's ``(is_valid, error)`` pair into a field error."""
    is_valid, error = result
    if not is_valid:
        raise serializers.ValidationError(error)
