from django.contrib import admin
from .models import ManagementLog

@admin.register(ManagementLog)
class ManagementLogAdmin(admin.ModelAdmin):
    list_display = ('admin', 'action', 'transaction', 'timestamp')
    list_filter = ('action',)
    readonly_fields = ('admin', 'action', 'transaction', 'details', 'timestamp')
