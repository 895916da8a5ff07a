from decimal import Decimal
from rest_framework import serializers
from django.conf import settings
from .models import Gig, Applicant, GigRequest
from apps.users.serializers import UserSerializer
from core.constants import GIG_STATUS_CHOICES, GIG_STATUS_OPEN, APPLICANT_DECISIONS
from core.exceptions import InvalidState
from core.utils import atomic_write
from .review_serializers import ReviewSerializer
from .services import lock_gig
import logging

logger = logging.getLogger(__name__)

class ApplicantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Applicant
        fields = ['id', 'gig', 'student', 'student_username', 'message', 'status', 'applied_at', 'decided_at']
        read_only_fields = fields

class ApplySerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=APPLICANT_DECISIONS)

class InviteSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()

class GigRequestSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = GigRequest
        fields = ['id', 'gig', 'student', 'status', 'created_at']
        read_only_fields = fields

class GigSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=GIG_STATUS_CHOICES, read_only=True)
    client = serializers.ReadOnlyField(source='client.username')
    selected_student = UserSerializer(read_only=True)
    budget = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    net_payout = serializers.SerializerMethodField()

    class Meta:
        model = Gig
        fields = [
            'id', 'title', 'description', 'required_skills', 'budget', 'net_payout', 'currency',
            'deadline', 'number_of_reports', 'progress_reports', 'status', 'client',
            'client_username', 'selected_student', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'client', 'client_username', 'status', 'selected_student', 'created_at', 'updated_at'
        ]

    def get_net_payout(self, obj):
        # Student-facing amount; never stored
        from apps.payments.engine import net_payout
        return str(net_payout(obj.budget))

    def validate_required_skills(self, value):
        if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
            raise serializers.ValidationError("required_skills must be a list of strings.")
        return [s.strip() for s in value if s.strip()]

    def create(self, validated_data):
        user = self.context['request'].user
        validated_data.setdefault('currency', settings.DEFAULT_CURRENCY)
        gig = Gig.objects.create(client=user, client_username=user.display_name, **validated_data)
        logger.info(f"Gig {gig.id} created by client {user.id}")
        return gig

    def update(self, instance, validated_data):
        with atomic_write('update_gig'):
            gig = lock_gig(instance.pk)
            if gig.status != GIG_STATUS_OPEN:
                raise InvalidState("Only open gigs can be edited.")
            for attr, value in validated_data.items():
                setattr(gig, attr, value)
            gig.save(update_fields=list(validated_data) + ['updated_at'])
        logger.info(f"Gig {gig.id} edited by client {gig.client_id}")
        return gig

class GigDetailSerializer(GigSerializer):
    applicants = ApplicantSerializer(many=True, read_only=True)
    reviews = ReviewSerializer(many=True, read_only=True)

    class Meta(GigSerializer.Meta):
        fields = GigSerializer.Meta.fields + ['applicants', 'reviews']
