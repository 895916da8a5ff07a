from rest_framework import serializers
from .models import Review

class ReviewSerializer(serializers.ModelSerializer):
    client_username = serializers.ReadOnlyField(source='client.username')
    student_reply = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'gig', 'client', 'client_username', 'student', 'rating', 'comment', 'student_reply', 'created_at']
        read_only_fields = fields

    def get_student_reply(self, obj):
        reply = obj.student_reply
        if reply is None:
            return None
        return {
            'text': reply['text'],
            'replied_at': serializers.DateTimeField().to_representation(reply['replied_at']),
        }

class SubmitReviewSerializer(serializers.Serializer):
    # Range is enforced by the aggregator so out-of-range values surface as invalid_rating
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')

class ReplySerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True)
