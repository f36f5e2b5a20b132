"""
Таблицы и формы сущностей через тестовый клиент
"""
from datetime import date

from dekanat_core.backend_client import BackendError

INSTITUTE = {'name': 'Химфак', 'email': 'chem@uni.ru', 'phone': '+74950000003'}


def text(response):
    return response.get_data(as_text=True)


class TestInstituteList:

    def test_search(self, client):
        page = text(client.get('/institutes/?q=мех'))
        assert 'Мехмат' in page
        assert 'Физфак' not in page
        assert 'Найдено: 1' in page

    def test_toggle_sort_redirects_with_flipped_order(self, client):
        response = client.get('/institutes/?toggle=name&page=0&per_page=10&order=asc&sort=name')
        assert response.status_code == 302
        location = response.headers['Location']
        assert 'order=desc' in location and 'sort=name' in location

    def test_descending_order(self, client):
        page = text(client.get('/institutes/?sort=name&order=desc'))
        assert page.index('Физфак') < page.index('Мехмат')

    def test_load_error_is_shown(self, client, backend):
        backend.institutes.errors['list'] = BackendError('Сервер недоступен', 503)
        response = client.get('/institutes/')
        assert response.status_code == 200
        assert 'Сервер недоступен' in text(response)

    def test_empty_message(self, client):
        assert 'Институты не найдены' in text(client.get('/institutes/?q=zzz'))

    def test_stale_page_after_delete_moves_back(self, admin_client, backend):
        backend.institutes.records = {
            i: {'id': i, 'name': f'Институт {i:02d}', 'email': f'i{i}@uni.ru', 'phone': '+74950000000'}
            for i in range(1, 12)
        }
        page_url = '/institutes/?page=1&per_page=10&order=asc&sort=name'
        assert 'Институт 11' in text(admin_client.get(page_url))

        response = admin_client.post('/institutes/11/delete', data={'next': page_url})
        assert response.headers['Location'].endswith(page_url)
        assert 11 not in backend.institutes.records

        response = admin_client.get(page_url)
        assert response.status_code == 302
        assert 'page=0' in response.headers['Location']


class TestInstituteForm:

    def test_create(self, admin_client, backend, audit_actions):
        response = admin_client.post('/institutes/create', data=INSTITUTE)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/institutes/')
        assert {**INSTITUTE, 'id': 3} in backend.institutes.records.values()
        assert ('create_institute', 'success') in audit_actions()

    def test_values_are_trimmed(self, admin_client, backend):
        admin_client.post('/institutes/create', data={**INSTITUTE, 'name': '  Химфак  '})
        assert backend.institutes.records[3]['name'] == 'Химфак'

    def test_invalid_phone_shows_field_error(self, admin_client, backend):
        response = admin_client.post('/institutes/create', data={**INSTITUTE, 'phone': '8-495'})
        assert response.status_code == 200
        assert 'Формат: + и 5–15 цифр' in text(response)
        assert len(backend.institutes.records) == 2

    def test_duplicate_name(self, admin_client, backend):
        response = admin_client.post('/institutes/create', data={**INSTITUTE, 'name': 'физфак'})
        assert 'Институт «физфак» уже существует' in text(response)
        assert len(backend.institutes.records) == 2

    def test_backend_rejection_is_shown_and_audited(self, admin_client, backend, audit_actions):
        backend.institutes.errors['create'] = BackendError('E-mail уже используется', 409)
        response = admin_client.post('/institutes/create', data=INSTITUTE)
        assert response.status_code == 200
        assert 'E-mail уже используется' in text(response)
        assert ('create_institute', 'error') in audit_actions()

    def test_backend_rejection_without_message(self, admin_client, backend):
        backend.institutes.errors['create'] = BackendError('', 500)
        assert 'Не удалось сохранить изменения' in text(admin_client.post('/institutes/create', data=INSTITUTE))

    def test_edit_form_is_prefilled(self, admin_client):
        page = text(admin_client.get('/institutes/1'))
        assert 'value="Физфак"' in page
        assert '/institutes/1/delete' in page

    def test_edit_keeps_own_name_and_returns_to_list_state(self, admin_client, backend, audit_actions):
        response = admin_client.post(
            '/institutes/1',
            query_string={'next': '/institutes/?q=физ'},
            data={'name': 'Физфак', 'email': 'new@uni.ru', 'phone': '+74950000001'},
        )
        assert response.status_code == 302
        assert '/institutes/?q=' in response.headers['Location']
        assert backend.institutes.records[1]['email'] == 'new@uni.ru'
        assert ('update_institute', 'success') in audit_actions()

    def test_edit_unknown_record(self, admin_client):
        assert admin_client.get('/institutes/42').status_code == 404

    def test_delete(self, admin_client, backend, audit_actions):
        response = admin_client.post('/institutes/2/delete', follow_redirects=True)
        assert 'Запись удалена.' in text(response)
        assert 2 not in backend.institutes.records
        assert ('delete_institute', 'success') in audit_actions()

    def test_delete_rejected_by_backend(self, admin_client, backend):
        backend.institutes.errors['delete'] = BackendError('Есть связанные кафедры', 409)
        response = admin_client.post('/institutes/1/delete')
        assert response.headers['Location'].endswith('/institutes/1')
        assert 1 in backend.institutes.records
        assert 'Есть связанные кафедры' in text(admin_client.get('/institutes/1'))


class TestKafedras:

    def test_list_shows_institute_name_and_filters_by_institute(self, client):
        page = text(client.get('/kafedras/?category=1'))
        assert 'Кафедра оптики' in page
        assert 'Кафедра алгебры' not in page

    def test_category_all(self, client):
        page = text(client.get('/kafedras/?category=ALL'))
        assert 'Кафедра оптики' in page and 'Кафедра алгебры' in page

    def test_create_uses_institute_lookup(self, admin_client, backend):
        form_page = text(admin_client.get('/kafedras/create'))
        assert 'Мехмат' in form_page and 'Физфак' in form_page

        response = admin_client.post('/kafedras/create', data={
            'name': 'Кафедра механики', 'email': 'mech-k@uni.ru', 'phone': '+74950000013',
            'room': '303', 'institute_id': '2', 'credentials_non_expired': 'y',
        })
        assert response.status_code == 302
        created = backend.kafedras.records[3]
        assert created['instituteId'] == 2
        assert created['credentialsNonExpired'] is True

    def test_institute_required(self, admin_client):
        response = admin_client.post('/kafedras/create', data={
            'name': 'Кафедра механики', 'email': 'mech-k@uni.ru', 'phone': '+74950000013',
            'room': '303', 'institute_id': '0',
        })
        assert 'Институт обязателен' in text(response)

    def test_same_name_in_same_institute(self, admin_client):
        response = admin_client.post('/kafedras/create', data={
            'name': 'Кафедра оптики', 'email': 'x@uni.ru', 'phone': '+74950000013',
            'room': '303', 'institute_id': '1',
        })
        assert 'в этом институте уже есть' in text(response)


class TestStudents:

    def student_form(self, **overrides):
        data = {
            'surname': 'Смирнов', 'name': 'Олег', 'patronymic': 'Петрович',
            'phone': '+79990000009', 'year_started': '2024', 'financial_form': 'CONTRACT',
        }
        data.update(overrides)
        return data

    def test_filter_by_financial_form(self, client):
        page = text(client.get('/students/?category=CONTRACT'))
        assert 'Петрова' in page
        assert 'Иванов' not in page

    def test_create_builds_nested_person(self, admin_client, backend):
        response = admin_client.post('/students/create', data=self.student_form())
        assert response.status_code == 302
        created = backend.students.records[3]
        assert created['person'] == {
            'surname': 'Смирнов', 'name': 'Олег', 'patronymic': 'Петрович', 'phone': '+79990000009',
        }
        assert created['yearStarted'] == 2024
        assert created['financialForm'] == 'CONTRACT'

    def test_year_out_of_range(self, admin_client):
        response = admin_client.post('/students/create', data=self.student_form(year_started='1999'))
        assert f'Год между 2000 и {date.today().year}' in text(response)

    def test_duplicate_student(self, admin_client, backend):
        response = admin_client.post('/students/create', data=self.student_form(
            surname='Иванов', name='Иван', patronymic='Иванович', year_started='2022',
        ))
        assert 'Студент Иванов Иван уже зарегистрирован за 2022' in text(response)
        assert len(backend.students.records) == 2

    def test_edit_prefills_nested_fields(self, admin_client):
        page = text(admin_client.get('/students/2'))
        assert 'value="Петрова"' in page
        assert 'value="2023"' in page


class TestEmployees:

    def test_list_resolves_lookups(self, client):
        page = text(client.get('/employees/'))
        assert 'Доцент' in page and 'Кафедра алгебры' in page

    def test_search_by_kafedra_name(self, client):
        assert 'Сидоров' in text(client.get('/employees/?q=алгебр'))
        assert 'Сидоров' not in text(client.get('/employees/?q=оптик'))

    def test_search_by_full_name(self, client):
        assert 'Сидоров' in text(client.get('/employees/?q=сидоров петр'))

    def test_search_by_phone(self, client):
        page = text(client.get('/employees/?q=79990000003'))
        assert 'Сидоров' in page
        assert 'Сотрудники не найдены' not in page

    def test_credentials_column(self, client, backend):
        page = text(client.get('/employees/'))
        assert 'Уч. данные' in page and '✔' in page

        backend.employees.records[1]['credentialsNonExpired'] = False
        page = text(client.get('/employees/'))
        assert '✔' not in page

    def test_add_button_uses_create_path(self, admin_client):
        assert '/employees/create' in text(admin_client.get('/employees/'))

    def test_new_alias_renders_form(self, admin_client):
        page = text(admin_client.get('/employees/new'))
        assert 'Профессор' in page and 'Кафедра оптики' in page

    def test_create(self, admin_client, backend):
        response = admin_client.post('/employees/new', data={
            'surname': 'Кузнецова', 'name': 'Мария', 'patronymic': 'Игоревна', 'phone': '+79990000010',
            'job_title_id': '2', 'kafedra_id': '1', 'credentials_non_expired': 'y',
        })
        assert response.status_code == 302
        created = backend.employees.records[2]
        assert created['jobTitleId'] == 2 and created['kafedraId'] == 1

    def test_duplicate_on_same_kafedra(self, admin_client):
        response = admin_client.post('/employees/create', data={
            'surname': 'Сидоров', 'name': 'Петр', 'patronymic': 'Ильич', 'phone': '+79990000010',
            'job_title_id': '2', 'kafedra_id': '2',
        })
        assert 'Сотрудник Сидоров Петр уже работает на этой кафедре' in text(response)

    def test_lookup_failure_blocks_save(self, admin_client, backend):
        backend.job_titles.errors['list'] = BackendError('Справочник недоступен', 503)
        response = admin_client.post('/employees/create', data={
            'surname': 'Кузнецова', 'name': 'Мария', 'patronymic': 'Игоревна', 'phone': '+79990000010',
            'job_title_id': '2', 'kafedra_id': '1',
        })
        assert response.status_code == 200
        assert 'Справочник недоступен' in text(response)
        assert len(backend.employees.records) == 1
