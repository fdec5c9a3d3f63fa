import json

from django.core.management.base import BaseCommand

from responsive_images.image_utils import get_all_inited_image_sizes, get_all_inited_image_sizes_formatted


class Command(BaseCommand):
    help = "List every registered image size, default sizes first"

    def add_arguments(self, parser):
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the raw size data as JSON",
        )

    def handle(self, *args, **options):
        if options.get("json"):
            self.stdout.write(json.dumps(get_all_inited_image_sizes(), indent=2))
            return

        sizes = get_all_inited_image_sizes_formatted()
        for description in sizes.values():
            self.stdout.write(description)

        self.stdout.write(self.style.SUCCESS(f"{len(sizes)} image sizes registered"))
