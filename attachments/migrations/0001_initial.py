import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import attachments.models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Attachment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file", models.FileField(max_length=255, upload_to=attachments.models.attachment_upload_to)),
                ("title", models.CharField(blank=True, max_length=255)),
                (
                    "alt_text",
                    models.CharField(blank=True, help_text="Alternative text for the image", max_length=255),
                ),
                (
                    "mime_type",
                    models.CharField(blank=True, help_text="Detected from the file name on save", max_length=100),
                ),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-uploaded_at"],
            },
        ),
        migrations.CreateModel(
            name="Post",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "thumbnail",
                    models.ForeignKey(
                        blank=True,
                        help_text="Featured image",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="posts",
                        to="attachments.attachment",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
