from django.contrib import admin
from .models import Gig, Applicant, GigRequest, Review

class ApplicantInline(admin.TabularInline):
    model = Applicant
    extra = 0
    readonly_fields = ('student', 'student_username', 'status', 'applied_at', 'decided_at')

@admin.register(Gig)
class GigAdmin(admin.ModelAdmin):
    list_display = ('title', 'client', 'budget', 'currency', 'status', 'selected_student', 'created_at')
    list_filter = ('status', 'currency')
    search_fields = ('title', 'client__username')
    inlines = [ApplicantInline]

@admin.register(GigRequest)
class GigRequestAdmin(admin.ModelAdmin):
    list_display = ('gig', 'student', 'status', 'created_at')
    list_filter = ('status',)

@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('gig', 'client', 'student', 'rating', 'created_at')
    list_filter = ('rating',)
