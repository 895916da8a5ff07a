from django.db import models
from django.contrib.auth.models import AbstractUser

class User(AbstractUser):
    email = models.EmailField(blank=True, null=True, unique=True)
    phone_number = models.CharField(max_length=15, blank=True, null=True, unique=True)

    @property
    def is_client(self):
        return hasattr(self, 'client')

    @property
    def is_student(self):
        return hasattr(self, 'student')

    @property
    def display_name(self):
        return self.username or (self.email or '').split('@')[0]

class Client(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='client')
    company_name = models.CharField(max_length=200, blank=True, null=True)
    location = models.CharField(max_length=100, blank=True, null=True)

    def __str__(self):
        return f"Client: {self.user.username}"

class Student(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='student')
    skills = models.JSONField(default=list, blank=True)
    following = models.ManyToManyField(User, blank=True, related_name='followers')
    blocked_users = models.ManyToManyField(User, blank=True, related_name='blocked_by')
    # Maintained incrementally by the review aggregator
    average_rating = models.FloatField(default=0.0)
    total_ratings = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"Student: {self.user.username}"

    def get_rating_stats(self):
        return {
            'average_rating': round(self.average_rating, 1),
            'total_ratings': self.total_ratings,
        }
