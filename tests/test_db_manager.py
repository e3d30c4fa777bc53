import unittest

from db_manager import DuplicateSlugError, NotFoundError
from helpers import make_db


class TestCatalogCrud(unittest.TestCase):
    def setUp(self):
        self.db = make_db()
        self.artist = self.db.create_artist({'name': 'Burna Boy', 'slug': 'burna-boy', 'genre': 'Afrobeats'})
        self.category = self.db.create_category({'name': 'Afrobeats', 'slug': 'afrobeats'})

    def tearDown(self):
        self.db.close()

    def _song(self, title, **extra):
        data = {'title': title, 'slug': extra.pop('slug', title.lower().replace(' ', '-')),
                'artist_id': self.artist['id']}
        data.update(extra)
        return self.db.create_song(data)

    def test_default_settings_seeded(self):
        self.assertEqual(self.db.get_setting('site_name'), 'OlasPlay')
        self.assertEqual(self.db.get_setting('site_tagline'), 'Download Free MP3 Music')
        self.assertEqual(self.db.get_setting('missing', 'fallback'), 'fallback')

    def test_set_setting_upserts(self):
        self.db.set_setting('site_name', 'Olas')
        self.db.set_setting('site_name', 'OlasPlay NG')
        self.assertEqual(self.db.get_setting('site_name'), 'OlasPlay NG')
        self.assertEqual(self.db.get_settings(['site_name']), {'site_name': 'OlasPlay NG'})

    def test_duplicate_slug_raises(self):
        with self.assertRaises(DuplicateSlugError):
            self.db.create_artist({'name': 'Burna', 'slug': 'burna-boy'})

    def test_update_duplicate_slug_raises(self):
        other = self.db.create_artist({'name': 'Wizkid', 'slug': 'wizkid'})
        with self.assertRaises(DuplicateSlugError):
            self.db.update_artist(other['id'], {'slug': 'burna-boy'})

    def test_update_and_delete_unknown_ids(self):
        self.assertIsNone(self.db.update_artist(9999, {'name': 'Ghost'}))
        self.assertFalse(self.db.delete_song(9999))
        self.assertFalse(self.db.delete_category(9999))

    def test_unknown_reference_raises(self):
        with self.assertRaises(NotFoundError):
            self.db.create_song({'title': 'X', 'slug': 'x', 'artist_id': 9999})

    def test_song_joins_names(self):
        song = self._song('Last Last', category_id=self.category['id'], is_trending=True)
        self.assertEqual(song['artist_name'], 'Burna Boy')
        self.assertEqual(song['category_name'], 'Afrobeats')
        self.assertIs(song['is_trending'], True)

        fetched = self.db.get_song_by_slug('last-last')
        self.assertEqual(fetched['id'], song['id'])
        self.assertEqual(self.db.get_artist(self.artist['id'])['song_count'], 1)
        self.assertEqual(self.db.list_categories()[0]['song_count'], 1)

    def test_album_track_count_follows_songs(self):
        album = self.db.create_album({'title': 'Love, Damini', 'slug': 'love-damini', 'artist_id': self.artist['id']})
        song = self._song('Last Last', album_id=album['id'])
        self._song('Alone', album_id=album['id'])
        self.assertEqual(self.db.get_album(album['id'])['track_count'], 2)

        self.db.update_song(song['id'], {'album_id': None})
        self.assertEqual(self.db.get_album(album['id'])['track_count'], 1)

        self.db.delete_song(self.db.get_song_by_slug('alone')['id'])
        self.assertEqual(self.db.get_album(album['id'])['track_count'], 0)

    def test_deleting_artist_keeps_songs(self):
        song = self._song('Last Last')
        self.assertTrue(self.db.delete_artist(self.artist['id']))
        orphan = self.db.get_song(song['id'])
        self.assertIsNone(orphan['artist_id'])
        self.assertIsNone(orphan['artist_name'])

    def test_list_songs_filters_and_orders(self):
        a = self._song('Alpha', genre='Afrobeats')
        b = self._song('Bravo', genre='Amapiano', is_trending=True)
        for _ in range(3):
            self.db.increment_song_counter(b['id'], 'plays')
        self.db.increment_song_counter(a['id'], 'downloads')

        popular = self.db.list_songs(order='popular')
        self.assertEqual(popular['total'], 2)
        self.assertEqual(popular['items'][0]['slug'], 'bravo')

        self.assertEqual(self.db.list_songs(order='downloads')['items'][0]['slug'], 'alpha')
        self.assertEqual([s['slug'] for s in self.db.list_songs(order='title')['items']], ['alpha', 'bravo'])
        self.assertEqual(self.db.list_songs(genre='amapiano')['total'], 1)
        self.assertEqual(self.db.list_songs(trending=True)['items'][0]['slug'], 'bravo')
        self.assertEqual(self.db.list_songs(search='burna')['total'], 2)
        self.assertEqual(self.db.list_songs(exclude_id=a['id'])['total'], 1)
        self.assertEqual(len(self.db.list_songs(limit=1)['items']), 1)

        with self.assertRaises(ValueError):
            self.db.list_songs(order='random')

    def test_trending_puts_flagged_first(self):
        plain = self._song('Plain')
        for _ in range(5):
            self.db.increment_song_counter(plain['id'], 'plays')
        self._song('Flagged', is_trending=True)
        self.assertEqual(self.db.get_trending_songs(limit=2)[0]['slug'], 'flagged')

    def test_increment_counter_rejects_unknown(self):
        song = self._song('Calm Down')
        self.assertTrue(self.db.increment_song_counter(song['id'], 'downloads'))
        self.assertEqual(self.db.get_song(song['id'])['downloads'], 1)
        with self.assertRaises(ValueError):
            self.db.increment_song_counter(song['id'], 'likes')

    def test_search_scopes(self):
        self._song('Last Last')
        self.db.create_artist({'name': 'Lasting Echo', 'slug': 'lasting-echo'})

        everything = self.db.search('last')
        self.assertEqual(len(everything['songs']), 1)
        self.assertEqual(len(everything['artists']), 1)
        self.assertEqual(self.db.search('last', scope='songs')['artists'], [])
        self.assertEqual(self.db.search('   '), {'songs': [], 'artists': []})
        with self.assertRaises(ValueError):
            self.db.search('last', scope='albums')

    def test_dashboard_stats(self):
        song = self._song('Last Last')
        self.db.increment_song_counter(song['id'], 'plays')
        stats = self.db.get_dashboard_stats()
        self.assertEqual(stats['songs'], 1)
        self.assertEqual(stats['artists'], 1)
        self.assertEqual(stats['categories'], 1)
        self.assertEqual(stats['total_plays'], 1)
        self.assertEqual(len(stats['recent_songs']), 1)

    def test_sitemap_entries(self):
        self._song('Last Last')
        entries = self.db.get_sitemap_entries()
        self.assertEqual([e['slug'] for e in entries['songs']], ['last-last'])
        self.assertEqual([e['slug'] for e in entries['artists']], ['burna-boy'])
        self.assertEqual([e['slug'] for e in entries['categories']], ['afrobeats'])
        self.assertIn('updated_at', entries['songs'][0])


class TestFindOrCreate(unittest.TestCase):
    def setUp(self):
        self.db = make_db()

    def tearDown(self):
        self.db.close()

    def test_artist_created_once(self):
        artist, created = self.db.find_or_create_artist('Burna Boy')
        self.assertTrue(created)
        self.assertEqual(artist['slug'], 'burna-boy')

        again, created = self.db.find_or_create_artist('  burna boy ')
        self.assertFalse(created)
        self.assertEqual(again['id'], artist['id'])

    def test_artist_fuzzy_match(self):
        artist, _ = self.db.find_or_create_artist('Asake Olamide')
        swapped, created = self.db.find_or_create_artist('Olamide Asake')
        self.assertFalse(created)
        self.assertEqual(swapped['id'], artist['id'])

        other, created = self.db.find_or_create_artist('Tems')
        self.assertTrue(created)
        self.assertNotEqual(other['id'], artist['id'])

    def test_non_latin_artists_kept_apart(self):
        one_ok, created = self.db.find_or_create_artist('ワンオクロック')
        self.assertTrue(created)
        self.assertEqual(one_ok['slug'], 'artist')

        boombox, created = self.db.find_or_create_artist('Бумбокс')
        self.assertTrue(created)
        self.assertNotEqual(boombox['id'], one_ok['id'])
        self.assertEqual(boombox['slug'], 'artist-2')

        again, created = self.db.find_or_create_artist('Бумбокс')
        self.assertFalse(created)
        self.assertEqual(again['id'], boombox['id'])

    def test_non_latin_album_gets_slug(self):
        album, created = self.db.find_or_create_album('東京', None)
        self.assertTrue(created)
        self.assertEqual(album['slug'], 'album')

        same, created = self.db.find_or_create_album('東京', None)
        self.assertFalse(created)
        self.assertEqual(same['id'], album['id'])

    def test_album_scoped_to_artist(self):
        burna, _ = self.db.find_or_create_artist('Burna Boy')
        wiz, _ = self.db.find_or_create_artist('Wizkid')

        album, created = self.db.find_or_create_album('Greatest Hits', burna['id'])
        self.assertTrue(created)
        self.assertEqual(album['slug'], 'burna-boy-greatest-hits')

        same, created = self.db.find_or_create_album('greatest hits', burna['id'])
        self.assertFalse(created)
        self.assertEqual(same['id'], album['id'])

        other, created = self.db.find_or_create_album('Greatest Hits', wiz['id'])
        self.assertTrue(created)
        self.assertNotEqual(other['id'], album['id'])


if __name__ == '__main__':
    unittest.main()
