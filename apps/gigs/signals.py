from django.dispatch import Signal

# Sent after an accept/reject decision is committed.
# kwargs: gig, applicant, decision, acting_client_id
applicant_decided = Signal()

# Sent after a review is committed. kwargs: review
review_submitted = Signal()
