"""Serializers for transforming domain models to API responses."""

from rest_framework import serializers


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    venue = serializers.CharField()
    date = serializers.DateTimeField(source="starts_at")
    price = serializers.IntegerField(source="price.amount")
    capacity = serializers.IntegerField(source="capacity.value")
    soldCount = serializers.IntegerField(source="sold_count")
    remaining = serializers.IntegerField()
    isActive = serializers.BooleanField(source="is_active")
    imageUrl = serializers.CharField(source="image_url", allow_null=True)
