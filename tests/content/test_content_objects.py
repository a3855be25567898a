"""
Tests for content types and content objects.
"""

import pytest

from tuskfish.content import CONTENT_FIELDS, ContentObject, ContentType
from tuskfish.core.exceptions import ContentError, ErrorCode, InvalidArgument


class TestContentType:
    """Test the closed set of content types."""

    def test_values(self):
        assert ContentType.values() == [
            'Article', 'Audio', 'Block', 'Collection', 'Download',
            'Image', 'Static', 'Tag', 'Video',
        ]

    @pytest.mark.parametrize("content_type,template,module", [
        (ContentType.ARTICLE, "article", "articles"),
        (ContentType.AUDIO, "audio", "soundtracks"),
        (ContentType.STATIC, "static", "staticpage"),
        (ContentType.VIDEO, "video", "videos"),
    ])
    def test_template_and_module(self, content_type, template, module):
        assert content_type.template == template
        assert content_type.module == module

    def test_label(self):
        assert ContentType.STATIC.label == "Static page"

    def test_lookup(self):
        assert ContentType.lookup('Video') is ContentType.VIDEO
        assert ContentType.lookup(' Video ') is ContentType.VIDEO

    @pytest.mark.parametrize("value", ["video", "Podcast", "", None, 3])
    def test_lookup_unknown(self, value):
        assert ContentType.lookup(value) is None

    def test_string_comparison(self):
        assert ContentType.TAG == "Tag"

    def test_tag_zeroed_fields(self):
        zeroed = ContentType.TAG.zeroed_fields
        assert {'date', 'creator', 'tags', 'media'} <= zeroed
        assert 'title' not in zeroed

    def test_block_keeps_only_its_fields(self):
        used = [name for name in CONTENT_FIELDS if ContentType.BLOCK.uses_field(name)]
        assert used == ['id', 'type', 'title', 'description', 'tags', 'online', 'submission_time']

    def test_article_uses_everything(self):
        assert ContentType.ARTICLE.zeroed_fields == frozenset()
        assert ContentType.ARTICLE.uses_field('media')
        assert not ContentType.ARTICLE.uses_field('colour')


class TestContentObject:
    """Test the content object model."""

    def test_defaults(self):
        obj = ContentObject()
        assert obj.type is ContentType.ARTICLE
        assert obj.id is None
        assert obj.tags == []
        assert obj.online == 1
        assert obj.parent == 0

    def test_string_type_is_resolved(self):
        assert ContentObject(type='Image').type is ContentType.IMAGE

    def test_unknown_type(self):
        with pytest.raises(ContentError) as exc_info:
            ContentObject(type='Podcast')
        assert exc_info.value.error_code == ErrorCode.CONTENT_UNKNOWN_TYPE
        assert exc_info.value.context.content_type == 'Podcast'

    def test_derived_properties(self):
        obj = ContentObject(type=ContentType.AUDIO)
        assert obj.template == 'audio'
        assert obj.module == 'soundtracks'
        assert obj.handler == 'AudioHandler'

    def test_from_row(self):
        row = {'id': 4, 'type': 'Video', 'title': 'Walk', 'online': 0, 'extra': 'ignored'}
        obj = ContentObject.from_row(row, tags=[2, 3])
        assert obj.id == 4
        assert obj.type is ContentType.VIDEO
        assert obj.online == 0
        assert obj.tags == [2, 3]
        assert not hasattr(obj, 'extra')

    def test_from_row_unknown_type(self):
        with pytest.raises(ContentError):
            ContentObject.from_row({'id': 1, 'type': 'Podcast'})

    def test_to_row(self):
        obj = ContentObject(type=ContentType.VIDEO, title='Walk', tags=[1])
        row = obj.to_row()
        assert row['type'] == 'Video'
        assert row['title'] == 'Walk'
        assert 'tags' not in row
        assert set(row) == set(CONTENT_FIELDS) - {'tags'}

    def test_to_row_nulls_unused_fields(self):
        obj = ContentObject(type=ContentType.TAG, title='Fish', creator='Ada', date='2024-01-01')
        row = obj.to_row()
        assert row['creator'] is None
        assert row['date'] is None
        assert row['title'] == 'Fish'

    def test_block_row(self):
        row = ContentObject(type=ContentType.BLOCK, title='Sidebar', counter=5).to_row()
        assert row['counter'] is None
        assert row['teaser'] is None
        assert row['online'] == 1


class TestContentObjectValidation:
    """Test that fields only ever hold storable values."""

    @pytest.mark.parametrize("field_name,value", [
        ('online', 7),
        ('online', None),
        ('online', True),
        ('rights', 0),
        ('counter', -3),
        ('parent', -1),
        ('file_size', -10),
        ('id', 0),
        ('submission_time', -1),
        ('date', '01/03/2024'),
        ('date', '2024-13-01'),
        ('date', 20240301),
        ('language', 'en-GB'),
        ('language', 5),
        ('tags', [0]),
        ('tags', ['x']),
        ('tags', 'fish'),
        ('title', 42),
    ])
    def test_rejects_invalid_value(self, field_name, value):
        with pytest.raises(InvalidArgument) as exc_info:
            ContentObject(**{field_name: value})
        assert exc_info.value.field_name == field_name

    def test_assignment_is_checked(self):
        obj = ContentObject(title='Walk', online=0)
        with pytest.raises(InvalidArgument):
            obj.online = 2
        with pytest.raises(InvalidArgument):
            obj.tags = [1, -1]
        assert obj.online == 0
        assert obj.tags == []

    def test_own_parent_is_circular(self):
        with pytest.raises(InvalidArgument) as exc_info:
            ContentObject(id=5, parent=5)
        assert exc_info.value.field_name == 'parent'

    def test_assigning_own_parent_is_circular(self):
        obj = ContentObject(id=5, parent=2)
        with pytest.raises(InvalidArgument):
            obj.parent = 5
        assert obj.parent == 2

    def test_nullable_fields_accept_none(self):
        obj = ContentObject(type=ContentType.BLOCK, counter=None, rights=None, parent=None,
                            date=None, language=None, tags=None)
        assert obj.counter is None
        assert obj.tags == []

    def test_values_are_cleaned(self):
        obj = ContentObject(date=' 2024-03-01 ', language=' en ', tags=(2, 1))
        assert obj.date == '2024-03-01'
        assert obj.language == 'en'
        assert obj.tags == [2, 1]

    def test_type_assignment_is_resolved(self):
        obj = ContentObject()
        obj.type = 'Video'
        assert obj.type is ContentType.VIDEO
        with pytest.raises(ContentError):
            obj.type = 'Podcast'
