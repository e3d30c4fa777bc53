import os
import tempfile
import unittest
import xml.etree.ElementTree as ET

from helpers import make_db
from sitemap import generate_sitemap, write_sitemap, format_lastmod
import structured_data

NS = {'sm': 'http://www.sitemaps.org/schemas/sitemap/0.9'}


class TestSitemap(unittest.TestCase):
    def setUp(self):
        self.db = make_db()
        artist = self.db.create_artist({'name': 'Tems', 'slug': 'tems'})
        self.db.create_category({'name': 'R&B', 'slug': 'r-b'})
        self.db.create_song({'title': 'Free Mind', 'slug': 'tems-free-mind-mp3-download', 'artist_id': artist['id']})

    def tearDown(self):
        self.db.close()

    def _urls(self, xml):
        root = ET.fromstring(xml.encode('utf-8'))
        return {
            url.find('sm:loc', NS).text: url
            for url in root.findall('sm:url', NS)
        }

    def test_static_and_dynamic_entries(self):
        self.db.set_setting('site_url', 'https://olas.test/')
        xml = generate_sitemap(self.db)
        self.assertIn('xmlns:music="http://www.google.com/schemas/sitemap-music/1.0"', xml)

        urls = self._urls(xml)
        self.assertEqual(urls['https://olas.test/'].find('sm:priority', NS).text, '1.0')
        self.assertEqual(urls['https://olas.test/search'].find('sm:changefreq', NS).text, 'monthly')

        song = urls['https://olas.test/song/tems-free-mind-mp3-download']
        self.assertEqual(song.find('sm:priority', NS).text, '0.8')
        self.assertEqual(song.find('sm:changefreq', NS).text, 'weekly')
        self.assertRegex(song.find('sm:lastmod', NS).text, r'^\d{4}-\d{2}-\d{2}$')

        self.assertEqual(urls['https://olas.test/artist/tems'].find('sm:priority', NS).text, '0.7')
        self.assertEqual(urls['https://olas.test/category/r-b'].find('sm:priority', NS).text, '0.6')
        self.assertEqual(len(urls), 5 + 3)

    def test_explicit_base_url_and_escaping(self):
        xml = generate_sitemap(self.db, base_url='https://olas.test/?a=1&b=2')
        self.assertIn('&amp;b=2', xml)
        ET.fromstring(xml.encode('utf-8'))

    def test_write_sitemap(self):
        path = os.path.join(tempfile.mkdtemp(), 'public', 'sitemap.xml')
        written = write_sitemap(self.db, path)
        self.assertTrue(written.exists())
        self.assertIn('<urlset', written.read_text(encoding='utf-8'))

    def test_format_lastmod(self):
        self.assertEqual(format_lastmod('2024-05-01 10:20:30'), '2024-05-01')
        self.assertEqual(format_lastmod('2024-05-01T10:20:30.123Z'), '2024-05-01')
        self.assertEqual(format_lastmod(None), '')


class TestStructuredData(unittest.TestCase):
    SONG = {
        'title': 'Free Mind', 'slug': 'tems-free-mind-mp3-download', 'artist_name': 'Tems',
        'cover_url': 'https://img.test/cover.jpg', 'duration': '3:45', 'genre': 'R&B',
        'release_date': None, 'description': 'Soulful.',
    }

    def test_song_schema(self):
        schema = structured_data.song_schema(self.SONG, 'https://olas.test')
        self.assertEqual(schema['@type'], 'MusicRecording')
        self.assertEqual(schema['duration'], 'PT3M45S')
        self.assertEqual(schema['byArtist'], {'@type': 'MusicGroup', 'name': 'Tems'})
        self.assertEqual(schema['url'], 'https://olas.test/song/tems-free-mind-mp3-download')
        self.assertNotIn('datePublished', schema)

    def test_iso_duration(self):
        self.assertEqual(structured_data.iso_duration('1:02:03'), 'PT1H2M3S')
        self.assertEqual(structured_data.iso_duration('245'), 'PT4M5S')
        self.assertIsNone(structured_data.iso_duration('n/a'))
        self.assertIsNone(structured_data.iso_duration(''))

    def test_artist_and_breadcrumb(self):
        artist = structured_data.artist_schema({'name': 'Tems', 'slug': 'tems', 'bio': 'Singer'}, 'https://olas.test')
        self.assertEqual(artist['@type'], 'MusicGroup')
        self.assertEqual(artist['description'], 'Singer')

        crumbs = structured_data.breadcrumb_schema(
            [{'name': 'Home', 'url': '/'}, {'name': 'Tems', 'url': '/artist/tems'}], 'https://olas.test')
        self.assertEqual([i['position'] for i in crumbs['itemListElement']], [1, 2])
        self.assertEqual(crumbs['itemListElement'][1]['item'], 'https://olas.test/artist/tems')

    def test_playlist_and_faq(self):
        playlist = structured_data.playlist_schema('R&B Songs', 'Best R&B', [self.SONG], 'https://olas.test')
        self.assertEqual(playlist['numTracks'], 1)
        self.assertEqual(playlist['track'][0]['name'], 'Free Mind')

        faq = structured_data.faq_schema(structured_data.song_faqs(self.SONG))
        self.assertEqual(faq['@type'], 'FAQPage')
        self.assertEqual(faq['mainEntity'][0]['@type'], 'Question')
        self.assertIn('Free Mind', faq['mainEntity'][0]['acceptedAnswer']['text'])


if __name__ == '__main__':
    unittest.main()
