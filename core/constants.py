# core/constants.py
GIG_STATUS_OPEN = 'open'
GIG_STATUS_IN_PROGRESS = 'in_progress'
GIG_STATUS_AWAITING_PAYOUT = 'awaiting_payout'
GIG_STATUS_COMPLETED = 'completed'
GIG_STATUS_CLOSED = 'closed'

GIG_STATUS_CHOICES = (
    (GIG_STATUS_OPEN, 'Open'),                        # Accepting applications
    (GIG_STATUS_IN_PROGRESS, 'In Progress'),          # A student has been selected
    (GIG_STATUS_AWAITING_PAYOUT, 'Awaiting Payout'),  # Client paid, release to student pending
    (GIG_STATUS_COMPLETED, 'Completed'),              # Paid; open for review
    (GIG_STATUS_CLOSED, 'Closed'),                    # Withdrawn by the client
)

# Every gig status change goes through this table.
GIG_TRANSITIONS = {
    GIG_STATUS_OPEN: frozenset({GIG_STATUS_IN_PROGRESS, GIG_STATUS_CLOSED}),
    GIG_STATUS_IN_PROGRESS: frozenset({GIG_STATUS_AWAITING_PAYOUT, GIG_STATUS_COMPLETED}),
    GIG_STATUS_AWAITING_PAYOUT: frozenset({GIG_STATUS_COMPLETED}),
    GIG_STATUS_COMPLETED: frozenset(),
    GIG_STATUS_CLOSED: frozenset(),
}

# Statuses in which the gig has a selected student
GIG_ASSIGNED_STATUSES = frozenset({
    GIG_STATUS_IN_PROGRESS, GIG_STATUS_AWAITING_PAYOUT, GIG_STATUS_COMPLETED,
})

APPLICANT_STATUS_PENDING = 'pending'
APPLICANT_STATUS_ACCEPTED = 'accepted'
APPLICANT_STATUS_REJECTED = 'rejected'

APPLICANT_STATUS_CHOICES = (
    (APPLICANT_STATUS_PENDING, 'Pending'),      # Student applied, awaiting client decision
    (APPLICANT_STATUS_ACCEPTED, 'Accepted'),    # Client selected this student
    (APPLICANT_STATUS_REJECTED, 'Rejected'),    # Client declined this student
)

APPLICANT_DECISIONS = (APPLICANT_STATUS_ACCEPTED, APPLICANT_STATUS_REJECTED)

GIG_REQUEST_STATUS_CHOICES = (
    ('pending', 'Pending'),      # Client invited student, awaiting response
    ('accepted', 'Accepted'),
    ('rejected', 'Rejected'),
)

TRANSACTION_STATUS_PENDING = 'pending'
TRANSACTION_STATUS_SUCCEEDED = 'succeeded'
TRANSACTION_STATUS_FAILED = 'failed'
TRANSACTION_STATUS_PENDING_RELEASE = 'pending_release_to_student'
TRANSACTION_STATUS_PAYOUT_SUCCEEDED = 'payout_to_student_succeeded'

TRANSACTION_STATUS_CHOICES = (
    (TRANSACTION_STATUS_PENDING, 'Pending'),
    (TRANSACTION_STATUS_SUCCEEDED, 'Succeeded'),
    (TRANSACTION_STATUS_FAILED, 'Failed'),
    (TRANSACTION_STATUS_PENDING_RELEASE, 'Paid by Client (Held)'),
    (TRANSACTION_STATUS_PAYOUT_SUCCEEDED, 'Paid to Student'),
)

# "Client paid" states; at most one per gig
TRANSACTION_SUCCESS_STATUSES = (
    TRANSACTION_STATUS_SUCCEEDED,
    TRANSACTION_STATUS_PENDING_RELEASE,
    TRANSACTION_STATUS_PAYOUT_SUCCEEDED,
)

PAYOUT_MODEL_DIRECT = 'direct'    # Confirmation completes the gig
PAYOUT_MODEL_SPLIT = 'split'      # Confirmation holds funds until an admin releases them

NOTIFICATION_TYPE_CHOICES = (
    ('application_status_update', 'Application Status Update'),
    ('payment_processed', 'Payment Processed'),
    ('payment_released', 'Payment Released'),
    ('review_received', 'Review Received'),
)

PAYMENT_AUDIT_EVENT_CHOICES = (
    ('confirmation_ignored', 'Confirmation Ignored'),
    ('payment_failed', 'Payment Failed'),
    ('payout_released', 'Payout Released'),
)

MANAGEMENT_ACTION_CHOICES = (
    ('release_payout', 'Release Payout'),
)
