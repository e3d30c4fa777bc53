import json
import unittest

import httpx

from helpers import mock_client
from playlist_fetcher import PlaylistFetcher, extract_initial_data, parse_playlist_data
from song_fetcher import FetchError

PLAYLIST_URL = "https://www.youtube.com/playlist?list=PLafro123"


def video(video_id, title=None, simple_title=None, author=None, owner=None, thumbs=True):
    renderer = {'videoId': video_id}
    if title:
        renderer['title'] = {'runs': [{'text': title}]}
    if simple_title:
        renderer['title'] = {'simpleText': simple_title}
    if author:
        renderer['shortBylineText'] = {'runs': [{'text': author}]}
    if owner:
        renderer['ownerText'] = {'runs': [{'text': owner}]}
    if thumbs:
        renderer['thumbnail'] = {'thumbnails': [{'url': f'https://i.ytimg.com/vi/{video_id}/default.jpg'}]}
    return {'playlistVideoRenderer': renderer}


def initial_data(items, title='Afrobeats Hits'):
    data = {
        'contents': {'twoColumnBrowseResultsRenderer': {'tabs': [{'tabRenderer': {'content': {
            'sectionListRenderer': {'contents': [{'itemSectionRenderer': {'contents': [
                {'playlistVideoListRenderer': {'contents': items}}
            ]}}]}
        }}}]}},
    }
    if title:
        data['metadata'] = {'playlistMetadataRenderer': {'title': title}}
    return data


def page(data):
    return (
        '<html><head><script>var ytcfg = {};</script></head><body>'
        f'<script nonce="abc">var ytInitialData = {json.dumps(data)};</script>'
        '</body></html>'
    )


class TestPlaylistParsing(unittest.TestCase):
    def test_extracts_initial_data_from_script(self):
        data = initial_data([video('a1', title='One')])
        self.assertEqual(extract_initial_data(page(data)), data)
        self.assertIsNone(extract_initial_data('<html><body>nothing here</body></html>'))

    def test_parse_video_fields_and_fallbacks(self):
        items = [
            video('a1', title='Essence', author='Wizkid'),
            video('b2', simple_title='Ye', owner='Burna Boy', thumbs=False),
            {'continuationItemRenderer': {}},
            {'playlistVideoRenderer': {'title': {'simpleText': 'no id'}}},
        ]
        playlist = parse_playlist_data(initial_data(items))

        self.assertEqual(playlist.playlist_title, 'Afrobeats Hits')
        self.assertEqual([v.video_id for v in playlist.videos], ['a1', 'b2'])
        first, second = playlist.videos
        self.assertEqual((first.title, first.author), ('Essence', 'Wizkid'))
        self.assertEqual(first.thumbnail, 'https://i.ytimg.com/vi/a1/default.jpg')
        self.assertEqual((second.title, second.author), ('Ye', 'Burna Boy'))
        self.assertEqual(second.thumbnail, 'https://img.youtube.com/vi/b2/hqdefault.jpg')
        self.assertEqual(second.url, 'https://www.youtube.com/watch?v=b2')

    def test_missing_title_defaults(self):
        playlist = parse_playlist_data(initial_data([video('a1')], title=None))
        self.assertEqual(playlist.playlist_title, 'Unknown Playlist')
        self.assertEqual(playlist.videos[0].title, 'Unknown Title')
        self.assertEqual(playlist.videos[0].author, 'Unknown Artist')


class TestPlaylistFetcher(unittest.IsolatedAsyncioTestCase):
    async def _fetch(self, response, url=PLAYLIST_URL):
        requests = []

        def handler(request):
            requests.append(request)
            return response

        async with mock_client(handler) as client:
            result = await PlaylistFetcher(client=client).fetch(url)
        return result, requests

    async def test_fetches_playlist(self):
        data = initial_data([video('a1', title='Essence', author='Wizkid')])
        playlist, requests = await self._fetch(httpx.Response(200, text=page(data)))

        self.assertEqual(len(playlist.videos), 1)
        self.assertEqual(requests[0].url.params['list'], 'PLafro123')
        self.assertEqual(requests[0].url.path, '/playlist')

    async def test_missing_list_param(self):
        with self.assertRaises(FetchError) as ctx:
            await self._fetch(httpx.Response(200), url='https://www.youtube.com/watch?v=abc')
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, 'Could not extract playlist ID from URL')

    async def test_http_error(self):
        with self.assertRaises(FetchError) as ctx:
            await self._fetch(httpx.Response(429))
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.message, 'Failed to fetch playlist: HTTP 429')

    async def test_unparseable_page(self):
        with self.assertRaises(FetchError) as ctx:
            await self._fetch(httpx.Response(200, text='<html>consent wall</html>'))
        self.assertEqual(ctx.exception.message, 'Could not parse playlist data')

    async def test_empty_playlist(self):
        with self.assertRaises(FetchError) as ctx:
            await self._fetch(httpx.Response(200, text=page(initial_data([]))))
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, 'No videos found in playlist')


if __name__ == '__main__':
    unittest.main()
