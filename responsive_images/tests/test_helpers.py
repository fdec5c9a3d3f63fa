"""
Tests for the markup builders.

The resize engine is replaced by a fake that names variants like the real one
and the dimension probe is patched, unless a test works on real files.
"""

import os
import shutil
import tempfile
from unittest.mock import Mock, call, patch

from django.test import SimpleTestCase, TestCase, override_settings

from attachments.models import Attachment, Post
from responsive_images import helpers
from responsive_images.attributes import PRESENT
from responsive_images.exceptions import NotLocal, ResizeFailed
from responsive_images.tests.mock_helpers import UPLOAD_URL, TempMediaMixin, fake_resize_engine, write_test_image

PHOTO_URL = UPLOAD_URL + "2024/01/photo.jpg"
SVG_URL = UPLOAD_URL + "2024/01/logo.svg"
MQ_WITH_WIDTH = {"(max-width: 600px)": 400, "": 800}


def variant(width, height):
    return f"{UPLOAD_URL}2024/01/photo-{width}x{height}.jpg"


class MediaWidthsTest(SimpleTestCase):
    def test_mapping_keeps_order(self):
        self.assertEqual(
            list(helpers.iter_media_widths(MQ_WITH_WIDTH)),
            [("(max-width: 600px)", 400), ("", 800)],
        )

    def test_unlabeled_keys(self):
        pairs = [("(min-width: 1200px)", "1200"), (None, 600), (0, 300)]

        self.assertEqual(
            list(helpers.iter_media_widths(pairs)),
            [("(min-width: 1200px)", 1200), ("", 600), ("", 300)],
        )

    def test_empty(self):
        self.assertEqual(list(helpers.iter_media_widths(None)), [])
        self.assertEqual(list(helpers.iter_media_widths({})), [])

    def test_height_for_aspect_ratio(self):
        self.assertEqual(helpers.height_for_aspect_ratio(400, 16 / 9), 225)
        self.assertEqual(helpers.height_for_aspect_ratio(100, 3), 33)
        self.assertEqual(helpers.height_for_aspect_ratio(5, 2), 3)


@patch("responsive_images.image_utils.get_attachment_info_by_path", return_value={"width": 1600, "height": 900})
@patch("responsive_images.resizer.get_resize_engine")
class ImgTest(SimpleTestCase):
    def setUp(self):
        self.engine = Mock(side_effect=fake_resize_engine)

    def test_srcset_and_sizes(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.img(PHOTO_URL, MQ_WITH_WIDTH, pixel_ratio_2x=True, aspect_ratio=16 / 9, img_alt="Photo")

        self.assertEqual(
            self.engine.call_args_list,
            [
                call(PHOTO_URL, 400, 225, True, True),
                call(PHOTO_URL, 800, 450, True, True),
                call(PHOTO_URL, 800, 450, True, True),
                call(PHOTO_URL, 1600, 900, True, True),
            ],
        )
        self.assertEqual(
            html,
            f'<img src="{PHOTO_URL}" alt="Photo" sizes="(max-width: 600px) 400px, 800px" width="1600" height="900" '
            f'srcset="{variant(400, 225)} 400w, {variant(800, 450)} 800w, {variant(800, 450)} 800w, '
            f'{variant(1600, 900)} 1600w">',
        )

    def test_without_aspect_ratio_height_is_not_requested(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        helpers.img(PHOTO_URL, {"": 300})

        self.engine.assert_called_once_with(PHOTO_URL, 300, None, True, True)

    def test_alt_is_stripped_and_escaped(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.img(PHOTO_URL, {"": 300}, img_alt='<b>Tom</b> & "Jerry"')

        self.assertIn('alt="Tom &amp; &quot;Jerry&quot;"', html)

    def test_attrs_and_filter(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        def lazyload(attrs):
            attrs["data-src"] = attrs.pop("src")
            return attrs

        html = helpers.img(
            PHOTO_URL, {"": 300}, lazy=True, attrs={"class": "hero", "hidden": PRESENT}, attrs_filter=lazyload
        )

        self.assertTrue(html.startswith('<img alt="" loading="lazy" sizes="300px"'))
        self.assertTrue(html.endswith(f'class="hero" hidden data-src="{PHOTO_URL}">'))

    def test_svg_is_not_resized(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.img(SVG_URL, MQ_WITH_WIDTH, pixel_ratio_2x=True, img_alt="Logo")

        self.engine.assert_not_called()
        mock_info.assert_not_called()
        self.assertEqual(html, f'<img src="{SVG_URL}" alt="Logo" data-is_svg="1">')

    def test_failures_return_empty_string(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = Mock(side_effect=ResizeFailed("Unable to write resized image"))

        with self.assertLogs("responsive_images.helpers", level="ERROR") as logs:
            html = helpers.img(PHOTO_URL, MQ_WITH_WIDTH)

        self.assertEqual(html, "")
        self.assertIn("Unable to write resized image", logs.output[0])

    def test_empty_url(self, mock_get_engine, mock_info):
        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.img("", MQ_WITH_WIDTH), "")


@patch("responsive_images.image_utils.get_attachment_info_by_path", return_value={"width": 1600, "height": 900})
@patch("responsive_images.resizer.get_resize_engine")
class PictureTest(SimpleTestCase):
    def setUp(self):
        self.engine = Mock(side_effect=fake_resize_engine)

    def test_one_source_per_media_query(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.picture(
            PHOTO_URL, MQ_WITH_WIDTH, pixel_ratio_2x=True, aspect_ratio=16 / 9, img_alt="Photo", lazy=True
        )

        self.assertEqual(self.engine.call_count, 4)
        self.assertEqual(
            html,
            "<picture>\n"
            f'\t<source media="(max-width: 600px)" srcset="{variant(400, 225)} 1x, {variant(800, 450)} 2x">\n'
            f'\t<source srcset="{variant(800, 450)} 1x, {variant(1600, 900)} 2x">\n'
            f'\t<img src="{PHOTO_URL}" alt="Photo" loading="lazy" width="1600" height="900">\n'
            "</picture>",
        )

    def test_attrs_go_on_picture(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.picture(PHOTO_URL, {"": 300}, attrs={"class": "hero"})

        self.assertTrue(html.startswith('<picture class="hero">\n'))

    def test_filters(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        def mark(name):
            def add(attrs):
                attrs[f"data-{name}"] = 1
                return attrs

            return add

        html = helpers.picture(
            PHOTO_URL,
            {"": 300},
            picture_attrs_filter=mark("picture"),
            img_attrs_filter=mark("img"),
            source_attrs_filter=mark("source"),
        )

        self.assertIn('<picture data-picture="1">', html)
        self.assertIn('data-source="1">', html)
        self.assertIn('data-img="1">', html)

    def test_svg_has_no_sources(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = self.engine

        html = helpers.picture(SVG_URL, MQ_WITH_WIDTH, img_alt="Logo")

        self.engine.assert_not_called()
        self.assertEqual(html, f'<picture>\n\t<img src="{SVG_URL}" alt="Logo" data-is_svg="1">\n</picture>')

    def test_not_local_returns_empty_string(self, mock_get_engine, mock_info):
        mock_get_engine.return_value = Mock(side_effect=NotLocal("Url is not local"))

        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.picture("https://cdn.example.org/photo.jpg", MQ_WITH_WIDTH), "")


class PostAndAttachmentTest(TempMediaMixin, TestCase):
    """Builders by post or attachment id, against real files and the Pillow engine."""

    def setUp(self):
        super().setUp()
        self.url = self.add_image("2024/01/photo.jpg", size=(160, 90))
        self.attachment = Attachment.objects.create(file="2024/01/photo.jpg", alt_text="A photo")
        self.post = Post.objects.create(title="Hello <b>world</b>", thumbnail=self.attachment)

    def test_img_for_post(self):
        html = helpers.img_for_post(self.post.pk, {"": 80}, pixel_ratio_2x=True, aspect_ratio=16 / 9)

        self.assertEqual(
            html,
            f'<img src="{self.url}" alt="Hello world" sizes="80px" width="160" height="90" '
            f'srcset="{variant(80, 45)} 80w, {self.url} 160w">',
        )

    def test_picture_for_post(self):
        html = helpers.picture_for_post(self.post.pk, {"(max-width: 600px)": 80}, lazy=True)

        self.assertIn(f'<source media="(max-width: 600px)" srcset="{variant(80, 45)} 1x">', html)
        self.assertIn(f'<img src="{self.url}" alt="Hello world" loading="lazy" width="160" height="90">', html)

    def test_post_without_thumbnail(self):
        post = Post.objects.create(title="No image")

        self.assertEqual(helpers.img_for_post(post.pk, {"": 80}), "")
        self.assertEqual(helpers.picture_for_post(post.pk, {"": 80}), "")

    def test_unknown_post(self):
        self.assertEqual(helpers.img_for_post(9999, {"": 80}), "")
        self.assertEqual(helpers.picture_for_post(None, {"": 80}), "")

    def test_img_by_attachment_id(self):
        html = helpers.img_by_attachment_id(self.attachment.pk, {"": 80}, img_alt="Photo", attrs={"class": "wide"})

        self.assertEqual(
            html,
            f'<img src="{self.url}" alt="Photo" sizes="80px" width="160" height="90" '
            f'srcset="{variant(80, 45)} 80w" class="wide">',
        )

    def test_picture_by_attachment_id(self):
        html = helpers.picture_by_attachment_id(self.attachment.pk, {"": 40}, aspect_ratio=1)

        self.assertIn(f'<source srcset="{variant(40, 40)} 1x">', html)

    def test_unknown_attachment(self):
        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.img_by_attachment_id(9999, {"": 80}), "")

    def test_missing_file(self):
        missing = Attachment.objects.create(file="2024/01/missing.jpg")

        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.picture_by_attachment_id(missing.pk, {"": 80}), "")


class ResizeImgTest(TempMediaMixin, SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.url = self.add_image("2024/01/photo.jpg", size=(160, 90))

    def test_resize(self):
        self.assertEqual(helpers.resize_img(self.url, 80, 45), variant(80, 45))

    def test_protocol_relative_url(self):
        relative_url = self.url.replace("https:", "")

        self.assertEqual(helpers.resize_img(relative_url, 80, 45), variant(80, 45))

    @override_settings(RESPONSIVE_IMAGES={"UPLOAD_URL": UPLOAD_URL, "USE_HTTPS": False})
    def test_protocol_relative_url_without_https(self):
        relative_url = self.url.replace("https:", "")

        self.assertEqual(helpers.resize_img(relative_url, 80, 45), variant(80, 45).replace("https:", "http:"))

    def test_failure_returns_original_url(self):
        missing = self.media_url("2024/01/missing.jpg")

        with self.assertLogs("responsive_images.helpers", level="WARNING"):
            self.assertEqual(helpers.resize_img(missing, 80), missing)


class OutsideUploadDirTest(TempMediaMixin, SimpleTestCase):
    """Urls escaping the upload dir with dot segments are neither read nor written."""

    def setUp(self):
        super().setUp()
        self.outside = tempfile.mkdtemp(prefix="responsive_images_outside_")
        self.addCleanup(shutil.rmtree, self.outside, ignore_errors=True)
        write_test_image(os.path.join(self.outside, "secret.jpg"), size=(160, 90))
        self.url = f"{UPLOAD_URL}../{os.path.basename(self.outside)}/secret.jpg"

    def test_builders_render_nothing(self):
        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.img(self.url, {"": 80}), "")
        with self.assertLogs("responsive_images.helpers", level="ERROR"):
            self.assertEqual(helpers.picture(self.url, {"": 80}), "")

        self.assertEqual(os.listdir(self.outside), ["secret.jpg"])

    def test_resize_img_keeps_url(self):
        with self.assertLogs("responsive_images.helpers", level="WARNING"):
            self.assertEqual(helpers.resize_img(self.url, 80), self.url)

        self.assertEqual(os.listdir(self.outside), ["secret.jpg"])
