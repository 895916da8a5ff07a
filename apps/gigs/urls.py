from django.urls import path
from .views import (
    GigCreateView, ClientGigListView, GigDetailView, GigUpdateView, GigCloseView,
    GigApplyView, GigApplicantsListView, ApplicantDecisionView, GigInviteView,
    GigReviewView, ReviewReplyView, StudentReviewsView
)

urlpatterns = [
    path('gigs/create/', GigCreateView.as_view(), name='gig_create'),
    path('gigs/mine/', ClientGigListView.as_view(), name='gig_list'),
    path('gigs/<int:id>/', GigDetailView.as_view(), name='gig_detail'),
    path('gigs/<int:id>/update/', GigUpdateView.as_view(), name='gig_update'),
    path('gigs/<int:id>/close/', GigCloseView.as_view(), name='gig_close'),
    path('gigs/<int:id>/apply/', GigApplyView.as_view(), name='gig_apply'),
    path('gigs/<int:id>/applicants/', GigApplicantsListView.as_view(), name='gig_applicants'),
    path('gigs/<int:id>/applicants/<int:student_id>/decide/', ApplicantDecisionView.as_view(), name='gig_applicant_decide'),
    path('gigs/<int:id>/invite/', GigInviteView.as_view(), name='gig_invite'),
    path('gigs/<int:id>/reviews/', GigReviewView.as_view(), name='gig_review'),
    path('gigs/reviews/<int:review_id>/reply/', ReviewReplyView.as_view(), name='review_reply'),
    path('gigs/students/<int:student_id>/reviews/', StudentReviewsView.as_view(), name='student_reviews'),
]
