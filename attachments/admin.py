from django.contrib import admin

from attachments.models import Attachment, Post


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ("__str__", "mime_type", "uploaded_at")
    list_filter = ("mime_type",)
    search_fields = ("title", "alt_text", "file")
    readonly_fields = ("mime_type",)


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "thumbnail", "created_at")
    search_fields = ("title",)
    prepopulated_fields = {"slug": ("title",)}
    raw_id_fields = ("thumbnail",)
