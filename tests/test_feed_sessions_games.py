#!/usr/bin/env python3
"""
Tests for the fragment-backed wrappers: Story, Session, Game and the
community Thread.

Run with:
    python -m pytest tests/test_feed_sessions_games.py
"""
import os
import sys
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psnapi.api import Community, Game, Session, SessionType, Story, Thread, User
from psnapi.client import Client
from psnapi.errors import MissingFieldError, ValidationError
from psnapi.models import StoryComment


def _client():
    client = MagicMock(spec=Client)
    client.online_id.return_value = 'MyAccount'
    return client


# ===========================================================================
# Story
# ===========================================================================

STORY = {
    'storyId': 'S1',
    'storyType': 'TROPHY',
    'caption': 'Tustin earned a trophy',
    'date': '2019-10-10T12:00:00Z',
    'likeCount': 3,
    'commentCount': 1,
    'liked': True,
    'targets': [{'type': 'TITLE_ID', 'meta': 'CUSA00001_00'}],
}


class TestStory(unittest.TestCase):

    def test_accessors(self):
        story = Story(_client(), STORY)
        self.assertEqual(story.story_id(), 'S1')
        self.assertEqual(story.story_type(), 'TROPHY')
        self.assertEqual(story.caption(), 'Tustin earned a trophy')
        self.assertEqual(story.like_count(), 3)
        self.assertEqual(story.comment_count(), 1)
        self.assertTrue(story.liked())

    def test_missing_story_id_raises(self):
        with self.assertRaises(MissingFieldError):
            Story(_client(), {}).story_id()

    def test_game_from_targets(self):
        user = MagicMock()
        game = Story(_client(), STORY, user).game()
        self.assertEqual(game.title_id(), 'CUSA00001_00')
        self.assertIs(game.user(), user)

    def test_game_none_without_title(self):
        self.assertIsNone(Story(_client(), {'storyId': 'S2'}).game())

    def test_like_and_unlike(self):
        client = _client()
        story = Story(client, STORY)
        story.like()
        self.assertTrue(client.post_json.call_args[0][0].endswith('/users/MyAccount/set/like/story/S1'))
        story.unlike()
        self.assertTrue(client.post_json.call_args[0][0].endswith('/users/MyAccount/set/dislike/story/S1'))

    def test_comment(self):
        client = _client()
        Story(client, STORY).comment('nice')
        url, data = client.post_json.call_args[0]
        self.assertTrue(url.endswith('/users/MyAccount/comment/S1'))
        self.assertEqual(data, {'commentString': 'nice'})

    def test_comments(self):
        client = _client()
        client.get.return_value = {'userComments': [
            {'commentId': 'c1', 'onlineId': 'Other', 'commentString': 'gz'},
        ]}
        comments = Story(client, STORY).comments()
        self.assertIsInstance(comments[0], StoryComment)
        self.assertEqual(comments[0].text, 'gz')
        self.assertEqual(comments[0].online_id, 'Other')


# ===========================================================================
# Session
# ===========================================================================

GAME_SESSION = {
    'sessionId': 'G1',
    'sessionName': 'Ranked',
    'npTitleType': 'game',
    'npTitleDetail': {
        'npTitleId': 'CUSA00001_00',
        'npTitleName': 'Some Game',
        'npTitleIconUrl': 'https://img.example.com/icon.png',
        'platform': 'PS4',
    },
    'members': [{'onlineId': 'Tustin'}, {'onlineId': 'MyAccount'}],
    'sessionMaxUser': 4,
    'sessionCreateTimestamp': '2019-10-10T12:00:00Z',
}


class TestSession(unittest.TestCase):

    def test_game_session(self):
        session = Session(_client(), GAME_SESSION)
        self.assertEqual(session.session_id(), 'G1')
        self.assertEqual(session.name(), 'Ranked')
        self.assertEqual(session.title_type(), SessionType.GAME)
        self.assertEqual(session.title_name(), 'Some Game')
        self.assertEqual(session.platform(), 'PS4')
        self.assertEqual(session.member_count(), 2)
        self.assertEqual(session.max_members(), 4)
        self.assertEqual(session.created_at(), datetime(2019, 10, 10, 12, 0, tzinfo=timezone.utc))

    def test_members_are_users(self):
        members = Session(_client(), GAME_SESSION).members()
        self.assertTrue(all(isinstance(m, User) for m in members))
        self.assertEqual([m.online_id_parameter() for m in members], ['Tustin', 'MyAccount'])

    def test_game_built_from_title_detail(self):
        client = _client()
        game = Session(client, GAME_SESSION).game()
        self.assertEqual(game.title_id(), 'CUSA00001_00')
        self.assertEqual(game.name(), 'Some Game')
        client.get.assert_not_called()

    def test_party_session(self):
        session = Session(_client(), {'sessionId': 'P1', 'npTitleType': 'party', 'memberCount': 5})
        self.assertEqual(session.title_type(), SessionType.PARTY)
        self.assertFalse(session.title_type() & SessionType.GAME)
        self.assertEqual(session.member_count(), 5)
        self.assertIsNone(session.game())

    def test_created_at_fraction_and_offset(self):
        session = Session(_client(), {'sessionId': 'G2', 'sessionCreateTimestamp': '2019-10-10T12:00:00.12Z'})
        self.assertEqual(session.created_at(),
                         datetime(2019, 10, 10, 12, 0, 0, 120000, tzinfo=timezone.utc))
        session = Session(_client(), {'sessionId': 'G3',
                                      'sessionCreateTimestamp': '2019-10-10T12:00:00.1234567+0000'})
        self.assertEqual(session.created_at(),
                         datetime(2019, 10, 10, 12, 0, 0, 123456, tzinfo=timezone.utc))

    def test_created_at_garbage_raises(self):
        session = Session(_client(), {'sessionId': 'G4', 'sessionCreateTimestamp': 'yesterday'})
        with self.assertRaises(MissingFieldError):
            session.created_at()

    def test_unknown_session(self):
        session = Session(_client(), {'sessionId': 'X'})
        self.assertEqual(session.title_type(), SessionType.UNKNOWN)
        self.assertIsNone(session.created_at())


# ===========================================================================
# Game
# ===========================================================================

class TestGame(unittest.TestCase):

    def test_fragment_fields_need_no_request(self):
        client = _client()
        game = Game(client, 'CUSA00001_00', data={
            'titleId': 'CUSA00001_00', 'name': 'Some Game',
            'image': {'url': 'https://img.example.com/g.png'}, 'lastPlayedDate': '2019-10-10T00:00:00Z',
        })
        self.assertEqual(game.name(), 'Some Game')
        self.assertEqual(game.image_url(), 'https://img.example.com/g.png')
        self.assertEqual(game.last_played(), '2019-10-10T00:00:00Z')
        client.get.assert_not_called()

    def test_missing_fields_fetch_title_once(self):
        client = _client()
        client.get.return_value = {'titleId': 'CUSA00001_00', 'name': 'Some Game', 'imageUrl': 'https://x/i.png'}
        game = Game(client, 'CUSA00001_00')
        self.assertEqual(game.name(), 'Some Game')
        self.assertEqual(game.image_url(), 'https://x/i.png')
        self.assertIsNone(game.last_played())
        self.assertEqual(client.get.call_count, 1)
        self.assertTrue(client.get.call_args[0][0].endswith('/titles/CUSA00001_00'))

    def test_name_missing_everywhere_raises(self):
        client = _client()
        client.get.return_value = {'titleId': 'CUSA00001_00'}
        with self.assertRaises(MissingFieldError):
            Game(client, 'CUSA00001_00').name()

    def test_communities(self):
        client = _client()
        client.get.return_value = {'size': 1, 'communities': [{'id': '55'}]}
        communities = Game(client, 'CUSA00001_00').communities()
        self.assertIsInstance(communities[0], Community)
        self.assertEqual(communities[0].community_id(), '55')
        self.assertEqual(client.get.call_args[0][1]['titleId'], 'CUSA00001_00')

    def test_communities_empty(self):
        client = _client()
        client.get.return_value = {'size': 0}
        self.assertEqual(Game(client, 'CUSA00001_00').communities(), [])

    def test_communities_null_list(self):
        client = _client()
        client.get.return_value = {'size': 1, 'communities': None}
        self.assertEqual(Game(client, 'CUSA00001_00').communities(), [])

    def test_community_without_id_raises(self):
        client = _client()
        client.get.return_value = {'size': 1, 'communities': [{'name': 'Fans'}]}
        with self.assertRaises(MissingFieldError):
            Game(client, 'CUSA00001_00').communities()


# ===========================================================================
# Community thread
# ===========================================================================

class TestThread(unittest.TestCase):

    def _thread(self, client):
        return Thread(client, {'id': 't1', 'name': 'MOTD'}, Community(client, '123'))

    def test_messages(self):
        client = _client()
        client.get.return_value = {'size': 1, 'messages': [{'message': 'welcome'}]}
        messages = self._thread(client).messages(limit=10)
        self.assertEqual(messages, [{'message': 'welcome'}])
        url, params = client.get.call_args[0]
        self.assertTrue(url.endswith('/communities/123/threads/t1/messages'))
        self.assertEqual(params, {'limit': 10})

    def test_messages_empty(self):
        client = _client()
        client.get.return_value = {'size': 0}
        self.assertEqual(self._thread(client).messages(), [])

    def test_send_message(self):
        client = _client()
        self._thread(client).send_message('hi all')
        self.assertEqual(client.post_json.call_args[0][1], {'message': 'hi all'})

    def test_thread_without_community_raises(self):
        with self.assertRaises(ValidationError):
            Thread(_client(), {'id': 't1'}).messages()


if __name__ == '__main__':
    unittest.main()
