from apps.gigs.models import Applicant, GigRequest
from decimal import Decimal, InvalidOperation
import logging
import re

logger = logging.getLogger(__name__)

TIER_FOLLOWED = 0
TIER_SKILL_MATCH = 1
TIER_OTHER = 2

class DiscoveryEngine:
    """
    Orders open gigs for a student's browse feed.

    Ranking is pure: it works on any objects exposing ``id``, ``client_id``,
    ``required_skills``, ``created_at`` and ``budget`` and never touches the
    database.
    """

    @staticmethod
    def normalize_string(s):
        """Normalize strings for comparison."""
        return re.sub(r'\s+', ' ', (s or '').lower().strip())

    @staticmethod
    def extract_words(text):
        return set(re.findall(r'\b\w+\b', DiscoveryEngine.normalize_string(text)))

    @staticmethod
    def skills_match(required_skill, viewer_skill):
        """Case-insensitive substring in either direction, or at least one shared word."""
        a = DiscoveryEngine.normalize_string(required_skill)
        b = DiscoveryEngine.normalize_string(viewer_skill)
        if not a or not b:
            return False
        if a in b or b in a:
            return True
        return bool(DiscoveryEngine.extract_words(a) & DiscoveryEngine.extract_words(b))

    @staticmethod
    def has_skill_overlap(required_skills, viewer_skills):
        return any(
            DiscoveryEngine.skills_match(required, skill)
            for required in (required_skills or [])
            for skill in (viewer_skills or [])
        )

    @staticmethod
    def tier_for(gig, viewer_skills, followed_ids):
        if gig.client_id in followed_ids:
            return TIER_FOLLOWED
        if DiscoveryEngine.has_skill_overlap(gig.required_skills, viewer_skills):
            return TIER_SKILL_MATCH
        return TIER_OTHER

    @staticmethod
    def net_payout(budget, commission_rate):
        return Decimal(budget) * (Decimal('1') - Decimal(commission_rate))

    @classmethod
    def rank(cls, gigs, viewer_skills=None, followed_ids=None, blocked_ids=None, excluded_gig_ids=None,
             skills_filter=None, min_payout=None, max_payout=None, commission_rate=Decimal('0.02')):
        """
        Return ``gigs`` filtered and ordered for the viewer.

        Gigs from blocked clients and gigs in ``excluded_gig_ids`` (applied to or
        invited to) are dropped. The rest are grouped into followed clients,
        skill matches and everything else; each group is newest first with ties
        broken by descending id. The skill and net payout filters are applied
        last and keep that order. Payout bounds are inclusive.
        """
        followed_ids = set(followed_ids or ())
        blocked_ids = set(blocked_ids or ())
        excluded_gig_ids = set(excluded_gig_ids or ())

        candidates = [
            gig for gig in gigs
            if gig.client_id not in blocked_ids and gig.id not in excluded_gig_ids
        ]
        # Stable sorts: newest first, then by tier
        candidates.sort(key=lambda g: (g.created_at, g.id), reverse=True)
        candidates.sort(key=lambda g: cls.tier_for(g, viewer_skills, followed_ids))

        if skills_filter:
            wanted = {cls.normalize_string(s) for s in skills_filter if cls.normalize_string(s)}
            if wanted:
                candidates = [
                    g for g in candidates
                    if wanted & {cls.normalize_string(s) for s in (g.required_skills or [])}
                ]
        if min_payout is not None:
            candidates = [g for g in candidates if cls.net_payout(g.budget, commission_rate) >= Decimal(min_payout)]
        if max_payout is not None:
            candidates = [g for g in candidates if cls.net_payout(g.budget, commission_rate) <= Decimal(max_payout)]
        return candidates

def excluded_gig_ids_for(user):
    """Gigs the student has applied to or been invited to."""
    applied = Applicant.objects.filter(student=user).values_list('gig_id', flat=True)
    requested = GigRequest.objects.filter(student=user).values_list('gig_id', flat=True)
    return set(applied) | set(requested)

def parse_payout(value):
    if value in (None, ''):
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid payout bound: {value}")
    if not amount.is_finite():
        raise ValueError(f"Invalid payout bound: {value}")
    return amount
