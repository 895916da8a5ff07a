from django.db import models
from django.conf import settings
from django.db.models import Q
from core.constants import (
    GIG_STATUS_CHOICES, GIG_STATUS_OPEN, GIG_TRANSITIONS, GIG_ASSIGNED_STATUSES,
    APPLICANT_STATUS_CHOICES, APPLICANT_STATUS_PENDING, APPLICANT_STATUS_ACCEPTED,
    GIG_REQUEST_STATUS_CHOICES,
)
from core.exceptions import InvalidState

class Gig(models.Model):
    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='gigs')
    client_username = models.CharField(max_length=150, blank=True)  # snapshot at posting time
    title = models.CharField(max_length=200)
    description = models.TextField()
    required_skills = models.JSONField(default=list)
    budget = models.DecimalField(max_digits=12, decimal_places=2)  # gross, client-facing
    currency = models.CharField(max_length=3, default='INR')
    deadline = models.DateTimeField()
    status = models.CharField(max_length=20, choices=GIG_STATUS_CHOICES, default=GIG_STATUS_OPEN)
    selected_student = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='selected_gigs'
    )
    number_of_reports = models.PositiveIntegerField(default=0)
    progress_reports = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at']),
        ]

    def __str__(self):
        return f"{self.title} - {self.client_username or self.client_id}"

    def can_transition_to(self, new_status):
        return new_status in GIG_TRANSITIONS.get(self.status, frozenset())

    def transition_to(self, new_status):
        """Move to ``new_status`` if the transition table allows it; the caller saves."""
        if not self.can_transition_to(new_status):
            raise InvalidState(f"Gig cannot move from '{self.status}' to '{new_status}'.")
        self.status = new_status

    @property
    def is_assigned(self):
        return self.status in GIG_ASSIGNED_STATUSES and self.selected_student_id is not None

class Applicant(models.Model):
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name='applicants')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='applications')
    student_username = models.CharField(max_length=150)  # snapshot at apply time
    message = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=APPLICANT_STATUS_CHOICES, default=APPLICANT_STATUS_PENDING)
    applied_at = models.DateTimeField(auto_now_add=True)
    decided_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['applied_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['gig', 'student'], name='unique_applicant_per_gig'),
            # Not created on MySQL; decide() checks selected_student under the gig lock
            models.UniqueConstraint(
                fields=['gig'], condition=Q(status=APPLICANT_STATUS_ACCEPTED), name='one_accepted_applicant_per_gig'
            ),
        ]

    def __str__(self):
        return f"{self.student_username} applied to {self.gig.title}"

    @property
    def is_decided(self):
        return self.status != APPLICANT_STATUS_PENDING

class GigRequest(models.Model):
    """A client's invitation for a specific student to take a gig."""
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name='requests')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='gig_requests')
    status = models.CharField(max_length=20, choices=GIG_REQUEST_STATUS_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('gig', 'student')

    def __str__(self):
        return f"Request for {self.student.username} on {self.gig.title}"

class Review(models.Model):
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name='reviews')
    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_given')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_received')
    rating = models.PositiveSmallIntegerField(choices=[(i, i) for i in range(1, 6)])  # 1 to 5 stars
    comment = models.TextField(blank=True, default='')
    student_reply_text = models.TextField(blank=True, null=True)
    student_replied_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ('gig', 'client', 'student')

    def __str__(self):
        return f"Review for {self.student.username} on {self.gig.title} ({self.rating}/5)"

    @property
    def student_reply(self):
        if self.student_reply_text is None:
            return None
        return {'text': self.student_reply_text, 'replied_at': self.student_replied_at}
