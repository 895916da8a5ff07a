from rest_framework import serializers
from django.contrib.auth import get_user_model
from .models import Student

User = get_user_model()

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name']
        read_only_fields = fields

class PublicStudentSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    rating_stats = serializers.SerializerMethodField()

    class Meta:
        model = Student
        fields = ['id', 'user', 'skills', 'rating_stats']

    def get_rating_stats(self, obj):
        return obj.get_rating_stats()
